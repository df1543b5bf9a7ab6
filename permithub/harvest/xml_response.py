"""Parsing and classification of ArchPmsHubService XML responses."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from permithub.common.constants import (
    AUTH_RESULT_CODES,
    NORMAL_AUTH_MESSAGE,
    SUCCESS_RESULT_CODE,
    UNREGISTERED_KEY_MESSAGE,
)
from permithub.common.errors import AuthError, ProtocolError, ResponseParseError
from permithub.common.models import FailureReason, Record

_XML_DECLARATION = re.compile(r"^\ufeff?\s*<\?xml[^>]*\?>")


@dataclass(frozen=True)
class ParsedResponse:
    result_code: str | None
    result_msg: str | None
    auth_msg: str | None
    reason_code: str | None
    error_msg: str | None
    total_count: int | None
    items: list[Record] = field(default_factory=list)


def _text(root: ET.Element, path: str) -> str | None:
    node = root.find(path)
    if node is None or node.text is None:
        return None
    value = node.text.strip()
    return value or None


def _first_text(root: ET.Element, paths: tuple[str, ...]) -> str | None:
    for path in paths:
        value = _text(root, path)
        if value is not None:
            return value
    return None


def _safe_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def flatten_item(item: ET.Element) -> Record:
    return {child.tag: (child.text or "").strip() for child in item}


def parse_response(xml_text: str) -> ParsedResponse:
    if not xml_text or not xml_text.strip():
        raise ResponseParseError("Empty response body")
    try:
        # Bodies arrive decoded; the declared encoding no longer applies.
        root = ET.fromstring(_XML_DECLARATION.sub("", xml_text, count=1).strip())
    except ET.ParseError as exc:
        raise ResponseParseError(f"Malformed XML: {exc}") from exc

    return ParsedResponse(
        result_code=_first_text(root, ("header/resultCode", ".//resultCode")),
        result_msg=_first_text(root, ("header/resultMsg", ".//resultMsg")),
        auth_msg=_text(root, ".//cmmMsgHeader/returnAuthMsg"),
        reason_code=_text(root, ".//cmmMsgHeader/returnReasonCode"),
        error_msg=_text(root, ".//cmmMsgHeader/errMsg"),
        total_count=_safe_int(_text(root, ".//totalCount")),
        items=[flatten_item(item) for item in root.iter("item")],
    )


def classify_response(parsed: ParsedResponse) -> FailureReason | None:
    """Single success/failure decision for every call site.

    Returns ``None`` for a usable response. An absent result code counts as success.
    """
    if parsed.auth_msg is not None and parsed.auth_msg != NORMAL_AUTH_MESSAGE:
        return FailureReason.AUTH

    code = parsed.result_code or parsed.reason_code
    if code is None or code == SUCCESS_RESULT_CODE:
        return None

    message = " ".join(filter(None, (parsed.result_msg, parsed.error_msg)))
    if code in AUTH_RESULT_CODES or "SERVICE_KEY" in message or UNREGISTERED_KEY_MESSAGE in message:
        return FailureReason.AUTH
    return FailureReason.PROTOCOL


def describe_failure(parsed: ParsedResponse) -> str:
    parts = [
        f"resultCode={parsed.result_code}" if parsed.result_code else None,
        parsed.result_msg,
        parsed.auth_msg,
        parsed.error_msg,
    ]
    return " ".join(part for part in parts if part) or "unknown API error"


def raise_for_failure(parsed: ParsedResponse) -> None:
    reason = classify_response(parsed)
    if reason is FailureReason.AUTH:
        raise AuthError(describe_failure(parsed))
    if reason is not None:
        raise ProtocolError(describe_failure(parsed))
