"""SpaceAPI v14 status document.

The same types are used by the server (to hold and serve the record) and
the client (to decode responses), so both sides agree on the wire format.
"""

import copy
from dataclasses import dataclass, field, fields
from typing import Optional

API_VERSION = "14"


class StatusDecodeError(ValueError):
    """Document does not match the v14 status schema."""


def _compact(data: dict) -> dict:
    """Drop unset members (None, empty dicts) from a wire dict."""
    return {k: v for k, v in data.items() if v is not None and v != {}}


def _expect(data: dict, key: str, types, required: bool = False):
    value = data.get(key)
    if value is None:
        if required:
            raise StatusDecodeError(f"Missing required field: {key}")
        return None
    allowed = types if isinstance(types, tuple) else (types,)
    # bool is a subclass of int
    if isinstance(value, bool) and bool not in allowed:
        raise StatusDecodeError(f"Invalid type for {key}: bool")
    if not isinstance(value, allowed):
        raise StatusDecodeError(f"Invalid type for {key}: {type(value).__name__}")
    return value


def _expect_str_list(data: dict, key: str) -> Optional[list]:
    value = _expect(data, key, list)
    if value is not None and not all(isinstance(v, str) for v in value):
        raise StatusDecodeError(f"Invalid entries in {key}: expected strings")
    return value


def _section(data: dict, key: str) -> dict:
    value = _expect(data, key, dict)
    return value if value is not None else {}

def _known_keys(cls) -> set:
    return {f.name for f in fields(cls) if f.name != "extra"}


def _unknown_members(data: dict, cls) -> dict:
    """Collect members the dataclass does not model, to republish as-is."""
    known = _known_keys(cls)
    return {k: v for k, v in data.items() if k not in known}


def _with_extra(extra: dict, data: dict) -> dict:
    merged = dict(extra)
    merged.update(_compact(data))
    return merged


@dataclass
class Contact:
    """Contact channels of the space."""
    email: Optional[str] = None
    irc: Optional[str] = None
    ml: Optional[str] = None
    phone: Optional[str] = None
    twitter: Optional[str] = None
    mastodon: Optional[str] = None
    matrix: Optional[str] = None
    jabber: Optional[str] = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Contact":
        values = {name: _expect(data, name, str) for name in _known_keys(cls)}
        return cls(extra=_unknown_members(data, cls), **values)

    def to_dict(self) -> dict:
        return _with_extra(
            self.extra, {name: getattr(self, name) for name in _known_keys(self)}
        )


@dataclass
class Location:
    """Physical location of the space."""
    address: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    timezone: Optional[str] = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        return cls(
            address=_expect(data, "address", str),
            lat=_expect(data, "lat", (int, float)),
            lon=_expect(data, "lon", (int, float)),
            timezone=_expect(data, "timezone", str),
            extra=_unknown_members(data, cls),
        )

    def to_dict(self) -> dict:
        return _with_extra(self.extra, {
            "address": self.address,
            "lat": self.lat,
            "lon": self.lon,
            "timezone": self.timezone,
        })


@dataclass
class State:
    """Open/closed state of the space.

    ``lastchange`` is a unix timestamp in seconds. Members such as ``icon``
    are kept in ``extra`` and survive open/close.
    """
    open: Optional[bool] = None
    lastchange: Optional[int] = None
    message: Optional[str] = None
    extra: dict = field(default_factory=dict)

    # Describe one particular change; dropped when the state flips again.
    TRANSIENT_MEMBERS = ("trigger_person",)

    @classmethod
    def from_dict(cls, data: dict) -> "State":
        return cls(
            open=_expect(data, "open", bool),
            lastchange=_expect(data, "lastchange", int),
            message=_expect(data, "message", str),
            extra=_unknown_members(data, cls),
        )

    def to_dict(self) -> dict:
        return _with_extra(self.extra, {
            "open": self.open,
            "lastchange": self.lastchange,
            "message": self.message,
        })

    def changed(self, is_open: bool, lastchange: int) -> "State":
        """Return a new State for a flip, keeping the configured extras.

        ``message`` and per-change members are cleared.
        """
        extra = {
            k: copy.deepcopy(v)
            for k, v in self.extra.items()
            if k not in self.TRANSIENT_MEMBERS
        }
        return State(open=is_open, lastchange=lastchange, extra=extra)


@dataclass
class Status:
    """Published status document of one space.

    v14 members without a dedicated field (``feeds``, ``sensors``,
    ``events``, ``cam``, ``spacefed``, ...) are kept verbatim in ``extra``.
    """
    space: str
    logo: str
    url: str
    contact: Contact = field(default_factory=Contact)
    location: Location = field(default_factory=Location)
    state: Optional[State] = None
    api_compatibility: Optional[list] = None
    projects: Optional[list] = None
    issue_report_channels: Optional[list] = None
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "Status":
        """Decode a status document.

        Args:
            data: Parsed JSON/YAML mapping

        Returns:
            Status instance

        Raises:
            StatusDecodeError: If required fields are missing or mistyped
        """
        if not isinstance(data, dict):
            raise StatusDecodeError(
                f"Status document must be a mapping, got {type(data).__name__}"
            )

        state = None
        if data.get("state") is not None:
            state = State.from_dict(_section(data, "state"))

        return cls(
            space=_expect(data, "space", str, required=True),
            logo=_expect(data, "logo", str, required=True),
            url=_expect(data, "url", str, required=True),
            contact=Contact.from_dict(_section(data, "contact")),
            location=Location.from_dict(_section(data, "location")),
            state=state,
            api_compatibility=_expect_str_list(data, "api_compatibility"),
            projects=_expect_str_list(data, "projects"),
            issue_report_channels=_expect_str_list(data, "issue_report_channels"),
            extra=_unknown_members(data, cls),
        )

    def to_dict(self) -> dict:
        """Encode to the wire format, omitting unset members."""
        data = _with_extra(self.extra, {
            "api_compatibility": self.api_compatibility,
            "space": self.space,
            "logo": self.logo,
            "url": self.url,
            "location": self.location.to_dict(),
            "contact": self.contact.to_dict(),
            "state": self.state.to_dict() if self.state is not None else None,
            "projects": self.projects,
            "issue_report_channels": self.issue_report_channels,
        })
        # contact and location are required members of a v14 document
        data.setdefault("contact", {})
        data.setdefault("location", {})
        return data
