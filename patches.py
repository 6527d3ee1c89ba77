import base64

from pydantic_core import PydanticSerializationError

from exc import PatchError
from models import Patch, PatchAction, PatchOp

LABELS_PATH = "/metadata/labels"


def json_patch_escape(val):
    return val.replace("~", "~0").replace("/", "~1")


def build_label_add(has_labels: bool, key: str, value) -> Patch:
    """Build the JSON Patch that sets metadata.labels[key] to value.

    A JSON Patch "add" fails when the parent of the target path does not
    exist, so when the object has no labels we first create an empty labels
    map and then add the label to it. The order of the operations matters.
    """

    if not isinstance(key, str):
        raise PatchError(f"label name must be a string, not {type(key).__name__}")

    actions = []
    if not has_labels:
        actions.append(PatchAction(op=PatchOp.ADD, path=LABELS_PATH, value={}))

    actions.append(
        PatchAction(
            op=PatchOp.ADD,
            path=f"{LABELS_PATH}/{json_patch_escape(key)}",
            value=value,
        )
    )

    return Patch(actions)


def encode_patch(patch: Patch) -> str:
    """Serialize a patch into the base64 form carried by AdmissionResponse.patch."""
    try:
        data = patch.model_dump_json()
    except (PydanticSerializationError, TypeError, ValueError) as err:
        raise PatchError(f"failed to serialize patch: {err}")

    return base64.b64encode(data.encode()).decode()
