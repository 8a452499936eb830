"""Pytest configuration and fixtures."""

import itertools
import re

import pytest

from client import PodioAPIError
from config import reset_config
from models import AppField, Application, Organization, Space
from resources.registry import ProviderRegistry, register_builtin_controllers, reset_registry

SPACE_DEFAULTS = {
    "privacy": "closed",
    "auto_join": False,
    "post_on_new_app": False,
    "post_on_new_member": False,
}

APP_DEFAULTS = {
    "type": "standard",
    "description": "",
    "usage": "",
    "icon": "1.png",
    "allow_edit": True,
    "allow_attachments": True,
    "allow_comments": True,
    "silent_creates": False,
    "silent_edits": False,
}

FIELD_DEFAULTS = {
    "description": "",
    "required": False,
    "hidden": False,
}


def _slug(name):
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


class FakePodioClient:
    """
    In-memory stand-in for PodioClient.

    Assigns IDs, applies server defaults and answers 410 for deleted
    objects. Set ``failures[method_name]`` to an exception to make the
    next call of that method raise it.
    """

    authenticated = True

    def __init__(self):
        self._ids = itertools.count(1000)
        self.orgs = {42: {"org_id": 42, "name": "Acme", "url_label": "acme"}}
        self.spaces = {}
        self.apps = {}
        self.fields = {}
        self.deleted = set()
        self.failures = {}
        self.calls = []

    def _record(self, method, *args):
        self.calls.append((method,) + args)
        error = self.failures.pop(method, None)
        if error is not None:
            raise error

    def _lookup(self, table, key, kind):
        if (kind, key) in self.deleted:
            raise PodioAPIError(410, f"The {kind} has been deleted")
        if key not in table:
            raise PodioAPIError(404, f"No {kind} with id {key}")
        return table[key]

    # Organizations

    async def get_organization(self, org_id):
        self._record("get_organization", org_id)
        org = self._lookup(self.orgs, org_id, "org")
        return Organization(url=f"https://podio.com/{org['url_label']}", **org)

    async def get_organization_by_slug(self, url_label):
        self._record("get_organization_by_slug", url_label)
        for org in self.orgs.values():
            if org["url_label"] == url_label:
                return Organization(url=f"https://podio.com/{url_label}", **org)
        raise PodioAPIError(404, f"No org with url {url_label}")

    # Spaces

    async def create_space(self, org_id, params):
        self._record("create_space", org_id, dict(params))
        self._lookup(self.orgs, org_id, "org")
        space_id = next(self._ids)
        space = {**SPACE_DEFAULTS, **params, "space_id": space_id, "org_id": org_id}
        space["url_label"] = _slug(params["name"])
        space["url"] = f"https://podio.com/acme/{space['url_label']}"
        self.spaces[space_id] = space
        return Space(**space)

    async def get_space(self, space_id):
        self._record("get_space", space_id)
        return Space(**self._lookup(self.spaces, space_id, "space"))

    async def update_space(self, space_id, params):
        self._record("update_space", space_id, dict(params))
        space = self._lookup(self.spaces, space_id, "space")
        space.update(params)
        return Space(**space)

    async def delete_space(self, space_id):
        self._record("delete_space", space_id)
        self._lookup(self.spaces, space_id, "space")
        del self.spaces[space_id]
        self.deleted.add(("space", space_id))

    # Apps

    def _app_model(self, app):
        config = {k: v for k, v in app.items() if k not in ("app_id", "space_id")}
        return Application(app_id=app["app_id"], space_id=app["space_id"], config=config)

    async def create_application(self, space_id, config):
        self._record("create_application", space_id, dict(config))
        self._lookup(self.spaces, space_id, "space")
        app_id = next(self._ids)
        app = {**APP_DEFAULTS, **config, "app_id": app_id, "space_id": space_id}
        self.apps[app_id] = app
        return self._app_model(app)

    async def get_application(self, app_id):
        self._record("get_application", app_id)
        return self._app_model(self._lookup(self.apps, app_id, "app"))

    async def update_application(self, app_id, config):
        self._record("update_application", app_id, dict(config))
        app = self._lookup(self.apps, app_id, "app")
        app.update(config)
        return self._app_model(app)

    async def delete_application(self, app_id):
        self._record("delete_application", app_id)
        self._lookup(self.apps, app_id, "app")
        del self.apps[app_id]
        self.deleted.add(("app", app_id))

    # App fields

    def _field_model(self, field):
        config = {
            k: field[k] for k in ("label", "description", "required", "hidden", "delta")
        }
        return AppField(
            field_id=field["field_id"],
            app_id=field["app_id"],
            type=field["type"],
            external_id=field["external_id"],
            config=config,
        )

    async def create_app_field(self, app_id, field_type, config):
        self._record("create_app_field", app_id, field_type, dict(config))
        self._lookup(self.apps, app_id, "app")
        field_id = next(self._ids)
        delta = len([f for f in self.fields.values() if f["app_id"] == app_id])
        field = {
            **FIELD_DEFAULTS,
            "delta": delta,
            **config,
            "field_id": field_id,
            "app_id": app_id,
            "type": field_type,
            "external_id": _slug(config["label"]),
        }
        self.fields[(app_id, field_id)] = field
        return self._field_model(field)

    async def get_app_field(self, app_id, field_id):
        self._record("get_app_field", app_id, field_id)
        return self._field_model(self._lookup(self.fields, (app_id, field_id), "field"))

    async def update_app_field(self, app_id, field_id, config):
        self._record("update_app_field", app_id, field_id, dict(config))
        field = self._lookup(self.fields, (app_id, field_id), "field")
        field.update(config)
        return self._field_model(field)

    async def delete_app_field(self, app_id, field_id):
        self._record("delete_app_field", app_id, field_id)
        self._lookup(self.fields, (app_id, field_id), "field")
        del self.fields[(app_id, field_id)]
        self.deleted.add(("field", (app_id, field_id)))


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset module level singletons between tests."""
    reset_config()
    reset_registry()
    yield
    reset_config()
    reset_registry()


@pytest.fixture
def fake_client():
    """In-memory Podio client."""
    return FakePodioClient()


@pytest.fixture
def registry(fake_client):
    """Registry with built-in controllers bound to the fake client."""
    registry = ProviderRegistry(version="test")
    register_builtin_controllers(registry)
    registry.attach_client(fake_client)
    return registry


@pytest.fixture
def sample_space():
    """Desired State of a space."""
    return {"org_id": 42, "name": "Eng", "privacy": "closed"}


@pytest.fixture
def sample_app():
    """Desired State of an app, without its parent space."""
    return {"name": "Projects", "item_name": "Project"}
