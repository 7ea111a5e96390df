"""Value types shared by the authenticate pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict


class AuthenticateAction(str, Enum):
    """Recommended action returned by the authenticate endpoint."""

    ALLOW = "allow"
    DENY = "deny"
    CHALLENGE = "challenge"


@dataclass(frozen=True, slots=True)
class FailoverStrategy:
    """
    Behaviour of authenticate calls that cannot be completed.

    Either the failure is raised to the caller, or a synthetic verdict carrying
    ``default_action`` is returned in place of the backend's answer.
    """

    default_action: AuthenticateAction = AuthenticateAction.ALLOW
    throw_on_failure: bool = False

    @classmethod
    def throw(cls) -> "FailoverStrategy":
        return cls(throw_on_failure=True)

    @classmethod
    def with_default(cls, action: AuthenticateAction | str) -> "FailoverStrategy":
        return cls(default_action=AuthenticateAction(action))

    @classmethod
    def parse(cls, value: str) -> "FailoverStrategy":
        """Build a strategy from ``throw``, ``allow``, ``deny`` or ``challenge``."""
        cleaned = value.strip().lower()
        if cleaned == "throw":
            return cls.throw()
        try:
            return cls.with_default(cleaned)
        except ValueError as exc:
            raise ValueError(
                f"Unknown failover strategy {value!r}; expected throw, allow, deny or challenge."
            ) from exc


class VerdictTransportModel(BaseModel):
    """Wire shape of a successful authenticate response."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    action: AuthenticateAction | None = None
    user_id: str | None = None
    device_token: str | None = None
    risk_policy: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class Verdict:
    """Outcome of one authenticate call, real or synthesized by failover."""

    action: AuthenticateAction
    user_id: str | None
    device_token: str | None = None
    risk_policy: dict[str, Any] | None = None
    is_failover: bool = False
    failover_reason: str | None = None
    internal: dict[str, Any] | None = None

    @classmethod
    def from_transport(cls, transport: VerdictTransportModel) -> "Verdict":
        if transport.action is None or transport.user_id is None:
            raise ValueError("Transport model must carry both action and user_id.")
        return cls(
            action=transport.action,
            user_id=transport.user_id,
            device_token=transport.device_token,
            risk_policy=transport.risk_policy,
            internal=transport.model_dump(mode="json"),
        )

    @classmethod
    def failover(
        cls,
        reason: str | None,
        *,
        action: AuthenticateAction,
        user_id: str | None,
    ) -> "Verdict":
        return cls(
            action=action,
            user_id=user_id,
            is_failover=True,
            failover_reason=reason,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "action": self.action.value,
            "user_id": self.user_id,
            "failover": self.is_failover,
        }
        if self.failover_reason is not None:
            data["failover_reason"] = self.failover_reason
        if self.device_token is not None:
            data["device_token"] = self.device_token
        if self.risk_policy is not None:
            data["risk_policy"] = self.risk_policy
        return data


class AsyncCallbackHandler(Protocol):
    """Receiver for the result of an asynchronous authenticate call."""

    def on_response(self, verdict: Verdict) -> None: ...

    def on_exception(self, exc: BaseException) -> None: ...
