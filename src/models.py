"""
Remote entity models - Objects returned by the Podio API.

Fields the server leaves out stay None; no local defaults are invented.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PodioModel(BaseModel):
    """Base model that ignores API fields this controller does not track."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Organization(PodioModel):
    org_id: int
    name: Optional[str] = None
    url: Optional[str] = None
    url_label: Optional[str] = None


class Space(PodioModel):
    space_id: int
    org_id: Optional[int] = None
    name: Optional[str] = None
    url: Optional[str] = None
    url_label: Optional[str] = None
    privacy: Optional[str] = None
    auto_join: Optional[bool] = None
    post_on_new_app: Optional[bool] = None
    post_on_new_member: Optional[bool] = None


class AppConfig(PodioModel):
    name: Optional[str] = None
    type: Optional[str] = None
    item_name: Optional[str] = None
    description: Optional[str] = None
    usage: Optional[str] = None
    icon: Optional[str] = None
    allow_edit: Optional[bool] = None
    allow_attachments: Optional[bool] = None
    allow_comments: Optional[bool] = None
    silent_creates: Optional[bool] = None
    silent_edits: Optional[bool] = None


class Application(PodioModel):
    app_id: int
    space_id: Optional[int] = None
    status: Optional[str] = None
    config: AppConfig = Field(default_factory=AppConfig)


class AppFieldConfig(PodioModel):
    label: Optional[str] = None
    description: Optional[str] = None
    delta: Optional[int] = None
    required: Optional[bool] = None
    hidden: Optional[bool] = None


class AppField(PodioModel):
    field_id: int
    app_id: Optional[int] = None
    type: Optional[str] = None
    external_id: Optional[str] = None
    status: Optional[str] = None
    config: AppFieldConfig = Field(default_factory=AppFieldConfig)
