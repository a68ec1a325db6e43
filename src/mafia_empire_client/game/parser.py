"""Parsers from game API JSON payloads into typed models."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone

from ..core.errors import MafiaProtocolError, extract_message
from .models import (
    CollectedBatch,
    CollectResult,
    DrugLab,
    EscapeResult,
    JailedUser,
    JailStatus,
    MessageResult,
    Production,
    StartProductionResult,
)

JsonObject = Mapping[str, object]


def parse_datetime(value: object) -> datetime | None:
    """Parse ISO-8601 text (``Z`` suffix allowed) into an aware datetime."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise MafiaProtocolError(f"invalid timestamp: {value!r}") from exc
    else:
        raise MafiaProtocolError(f"invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_datetime(payload: JsonObject, key: str) -> datetime:
    parsed = parse_datetime(payload.get(key))
    if parsed is None:
        raise MafiaProtocolError(f"{key} is required")
    return parsed


def _as_int(payload: JsonObject, key: str, *, default: int | None = None) -> int:
    value = payload.get(key)
    if value is None:
        if default is None:
            raise MafiaProtocolError(f"{key} is required")
        return default
    if isinstance(value, bool):
        raise MafiaProtocolError(f"{key} must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise MafiaProtocolError(f"{key} must be a number")


def _as_text(payload: JsonObject, key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    return str(value)


def parse_jail_status(payload: JsonObject) -> JailStatus:
    return JailStatus(
        is_jailed=bool(payload.get("isJailed", False)),
        jail_time_end=parse_datetime(payload.get("jailTimeEnd")),
        reason=_as_text(payload, "jailReason"),
    )


def parse_escape_result(payload: JsonObject) -> EscapeResult:
    return EscapeResult(
        success=bool(payload.get("success", False)),
        message=extract_message(payload) or "",
        jail_time_end=parse_datetime(payload.get("jailTimeEnd")),
    )


def parse_jailed_user(payload: JsonObject) -> JailedUser:
    return JailedUser(
        id=_as_int(payload, "id"),
        username=_as_text(payload, "username") or "",
        jail_time_end=parse_datetime(payload.get("jailTimeEnd")),
    )


def parse_drug_lab(payload: JsonObject) -> DrugLab:
    return DrugLab(
        id=_as_int(payload, "id"),
        name=_as_text(payload, "name") or "",
        level=_as_int(payload, "level", default=1),
        security_level=_as_int(payload, "securityLevel", default=0),
        capacity=_as_int(payload, "capacity", default=0),
        cost_to_upgrade=_as_int(payload, "costToUpgrade", default=0),
    )


def parse_production(payload: JsonObject) -> Production:
    drug = payload.get("drug")
    drug_name = None
    if isinstance(drug, Mapping):
        drug_name = _as_text(drug, "name")
    return Production(
        id=_as_int(payload, "id"),
        lab_id=_as_int(payload, "labId"),
        drug_id=_as_int(payload, "drugId"),
        quantity=_as_int(payload, "quantity"),
        completes_at=_require_datetime(payload, "completesAt"),
        is_completed=bool(payload.get("isCompleted", False)),
        success_rate=_as_int(payload, "successRate", default=0),
        drug_name=drug_name,
    )


def parse_start_production(payload: JsonObject) -> StartProductionResult:
    raw_production = payload.get("production")
    production = None
    if isinstance(raw_production, Mapping):
        production = parse_production(raw_production)
    return StartProductionResult(
        message=extract_message(payload) or "",
        completes_at=parse_datetime(payload.get("completesAt")),
        production=production,
    )


def parse_collect_result(payload: JsonObject) -> CollectResult:
    raw_results = payload.get("results", [])
    if not isinstance(raw_results, list):
        raise MafiaProtocolError("results must be a list")
    batches: list[CollectedBatch] = []
    for item in raw_results:
        if not isinstance(item, Mapping):
            raise MafiaProtocolError("results element must be an object")
        batches.append(
            CollectedBatch(
                drug_name=_as_text(item, "drugName") or "",
                quantity=_as_int(item, "quantity"),
                success=bool(item.get("success", False)),
            )
        )
    return CollectResult(message=extract_message(payload) or "", results=batches)


def parse_message_result(payload: JsonObject) -> MessageResult:
    return MessageResult(message=extract_message(payload) or "")


__all__ = [
    "parse_datetime",
    "parse_jail_status",
    "parse_escape_result",
    "parse_jailed_user",
    "parse_drug_lab",
    "parse_production",
    "parse_start_production",
    "parse_collect_result",
    "parse_message_result",
]
