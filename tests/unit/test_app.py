import importlib

import pytest


def test_app_module_imports_and_mounts_routes():
    main = importlib.import_module("app.main")

    paths = {route.path for route in main.app.routes}
    for expected in (
        "/api/v1/checkout",
        "/api/v1/payments/paypal-success",
        "/api/v1/payments/paypal-cancel",
        "/api/v1/auth/forgot-password",
        "/api/v1/auth/reset-password",
        "/api/v1/categories/{category_id}",
        "/api/v1/teacher/courses",
        "/api/v1/ratings/{rating_id}",
        "/api/v1/student/ratings",
    ):
        assert expected in paths


@pytest.mark.parametrize(
    "module",
    [
        "app.repositories.course_repo",
        "app.repositories.user_repo",
        "app.repositories.rating_repo",
        "app.repositories.password_reset_repo",
    ],
)
def test_repository_modules_import(module):
    assert importlib.import_module(module) is not None
