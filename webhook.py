import functools
import logging
import sys

from flask import Flask, Response, current_app, request

import codec
from exc import ApplicationError, DecodeError
from extract import identity
from models import AdmissionReview
from policy import KeywordPolicy, LabelPolicy

LOG = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


class DEFAULTS:
    KEYWORD = "SUYIIYII"
    LABEL_NAME = "create-by"
    LABEL_VALUE = "suyiiyii"
    MUTATE_KINDS = "Pod"
    ENABLE_MUTATION = True


def jsonresponse():
    """Encodes the (review, response) pair returned by a view function as an
    AdmissionReview JSON document."""

    def _outer(func):
        @functools.wraps(func)
        def _inner(*args, **kwargs):
            review, response = func(*args, **kwargs)
            return Response(codec.encode(review, response), mimetype="application/json")

        return _inner

    return _outer


def read_review() -> AdmissionReview:
    # The body is decoded whatever the content-type says; bad JSON is a 400.
    return codec.decode(request.get_data())


@jsonresponse()
def validate_resource():
    review = read_review()
    req = review.request
    policy = current_app.keyword_policy

    name = identity(req)
    decision = policy.validate(name)

    fields = {
        "uid": req.uid,
        "identity": name,
        "keyword": policy.keyword,
        "decision": "allow" if decision.allowed else "deny",
    }
    if decision.allowed:
        LOG.info("allowing %r", name, extra=fields)
    else:
        LOG.warning(
            "denying %r: name contains keyword %r", name, policy.keyword, extra=fields
        )

    return review, decision.to_response(req.uid)


@jsonresponse()
def mutate_resource():
    review = read_review()
    req = review.request
    kind = req.kind.kind if req.kind else None

    decision = current_app.label_policy.mutate(kind, req.object)

    fields = {
        "uid": req.uid,
        "kind": kind,
        "identity": identity(req),
        "decision": "allow" if decision.allowed else "deny",
    }
    if not decision.allowed:
        LOG.error(
            "refusing %s %r: %s",
            kind,
            fields["identity"],
            decision.status.message,
            extra=fields,
        )
    elif decision.patch:
        LOG.info(
            "adding label %s=%s to %s %r",
            current_app.label_policy.label_name,
            current_app.label_policy.label_value,
            kind,
            fields["identity"],
            extra=fields,
        )

    return review, decision.to_response(req.uid)


def handle_decodeerror(err):
    LOG.warning("rejecting request: %s", err)
    return str(err), 400, {"content-type": "text/plain"}


def handle_applicationerror(err):
    LOG.error("failed to handle request: %s", err)
    return str(err), 500, {"content-type": "text/plain"}


def health():
    return "OK", 200, {"content-type": "text/plain"}


def as_bool(val):
    if isinstance(val, str):
        return val.strip().lower() in ("1", "true", "yes", "on")

    return bool(val)


def split_kinds(kinds):
    if isinstance(kinds, str):
        kinds = kinds.split(",")

    return [kind.strip() for kind in kinds if kind.strip()]


def create_app(**config) -> Flask:
    """Use an application factory [1] to create the Flask app.

    Configuration is read from DEFAULTS, then from ADMISSION_* environment
    variables, then from keyword arguments, so tests can build an app with
    whatever settings they need.

    [1]: https://flask.palletsprojects.com/en/3.0.x/patterns/appfactories/
    """

    app = Flask(__name__)
    app.config.from_object(DEFAULTS)
    # Keep environment values as strings, so ADMISSION_LABEL_VALUE=true
    # yields the label "true" rather than a boolean.
    app.config.from_prefixed_env("ADMISSION", loads=str)
    if config:
        app.config.update(config)

    if not app.config.get("KEYWORD"):
        LOG.error("Missing keyword configuration")
        sys.exit(1)

    app.keyword_policy = KeywordPolicy(str(app.config["KEYWORD"]))

    app.errorhandler(DecodeError)(handle_decodeerror)
    app.errorhandler(ApplicationError)(handle_applicationerror)
    app.add_url_rule("/healthz", view_func=health)
    app.add_url_rule("/validate", view_func=validate_resource, methods=["POST"])

    if as_bool(app.config["ENABLE_MUTATION"]):
        app.label_policy = LabelPolicy(
            str(app.config["LABEL_NAME"]),
            str(app.config["LABEL_VALUE"]),
            kinds=split_kinds(app.config["MUTATE_KINDS"]),
        )
        app.add_url_rule("/mutate", view_func=mutate_resource, methods=["POST"])

    return app
