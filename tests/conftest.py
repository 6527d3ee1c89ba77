import pytest

import webhook


KEYWORD = "SUYIIYII"
LABEL_NAME = "create-by"
LABEL_VALUE = "suyiiyii"


@pytest.fixture()
def app():
    app = webhook.create_app(
        KEYWORD=KEYWORD,
        LABEL_NAME=LABEL_NAME,
        LABEL_VALUE=LABEL_VALUE,
        TESTING=True,
    )
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_review():
    def _make_review(name="", obj=None, kind="Pod", uid="1234"):
        return {
            "apiVersion": "admission.k8s.io/v1",
            "kind": "AdmissionReview",
            "request": {
                "uid": uid,
                "kind": {"group": "", "version": "v1", "kind": kind},
                "name": name,
                "namespace": "default",
                "operation": "CREATE",
                "object": obj,
            },
        }

    return _make_review
