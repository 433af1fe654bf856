"""
================================================================================
Allure Report Utilities
================================================================================

Attachment helpers used by the suites to enrich failure reports with
observed table state, traces and recordings.

================================================================================
"""

import json
from pathlib import Path
from typing import Any, Union

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

_ATTACHMENT_TYPES = {
    ".png": allure.attachment_type.PNG,
    ".webm": allure.attachment_type.WEBM,
    ".json": allure.attachment_type.JSON,
    ".txt": allure.attachment_type.TEXT,
    ".zip": None,
}


def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str, ensure_ascii=False)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_file(path: Union[str, Path], name: str = "") -> bool:
    """
    Attach a file (screenshot, video, trace archive) to Allure report.

    Args:
        path: File to attach
        name: Attachment name (defaults to the file name)

    Returns:
        True if the file existed and was attached
    """
    path = Path(path)
    if not path.exists():
        logger.debug(f"Attachment skipped, file not found: {path}")
        return False

    attachment_type = _ATTACHMENT_TYPES.get(path.suffix.lower())
    if attachment_type is None:
        allure.attach.file(str(path), name=name or path.name, extension=path.suffix.lstrip("."))
    else:
        allure.attach.file(str(path), name=name or path.name, attachment_type=attachment_type)
    logger.debug(f"Attached {path} to report")
    return True


__all__ = [
    "attach_file",
    "attach_json",
    "attach_text",
]
