from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from app.deps import require_director, require_role, require_staff


def _build_request(path: str = "/api/resource", method: str = "GET") -> Request:
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
        "path_params": {},
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
        "scheme": "http",
    }
    return Request(scope)


def test_require_director_denies_employee():
    user = SimpleNamespace(id=2, role="employee")

    with pytest.raises(HTTPException) as exc:
        require_director(request=_build_request("/api/staff", "POST"), user=user)

    assert exc.value.status_code == 403
    assert exc.value.detail == "Insufficient permissions"


def test_require_director_allows_director():
    user = SimpleNamespace(id=1, role="Director")

    assert require_director(request=_build_request(), user=user) is user


def test_require_staff_allows_employee():
    user = SimpleNamespace(id=2, role="employee")

    assert require_staff(request=_build_request(), user=user) is user


def test_directors_pass_any_role_gate():
    dependency = require_role(["employee"])
    user = SimpleNamespace(id=1, role="director")

    assert dependency(request=_build_request(), user=user) is user


def test_unknown_role_is_denied_everywhere():
    user = SimpleNamespace(id=9, role="guest")

    with pytest.raises(HTTPException) as exc:
        require_staff(request=_build_request(), user=user)

    assert exc.value.status_code == 403
