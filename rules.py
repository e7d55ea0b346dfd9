"""
Declarative validation rules for the six CHAIN collections.

Each RuleSet is derived from the entity's pydantic model: the model's fields
are the stored fields, its required fields must be non-empty and its
``Literal`` annotations become enumerations. Checks run in a fixed order and
the first failing one raises a single ValidationError.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Tuple, Type, get_args, get_origin

from pydantic import BaseModel

from errors import ValidationError
from models.appointment import Appointment
from models.event import Event
from models.professional import Professional
from models.student import Student
from models.teacher import Teacher
from models.user import User

# id policies
ID_OBJECTID = "objectid"    # generated bson ObjectId hex
ID_UUID = "uuid"            # generated uuid4
ID_SHORT = "short"          # client-supplied, else 8 random base36 chars
ID_REFERENCE = "reference"  # equals the referenced record's id


@dataclass(frozen=True)
class Reference:
    field: str
    collection: str
    copy: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleSet:
    entity: str
    collection: str
    fields: Tuple[str, ...]
    required: Tuple[str, ...]
    enums: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    dates: Tuple[str, ...] = ()
    reference: Optional[Reference] = None
    unique: Tuple[str, ...] = ()
    generated: Tuple[str, ...] = ()
    write_only: Tuple[str, ...] = ()
    id_policy: str = ID_OBJECTID

    @classmethod
    def from_model(cls, entity: str, collection: str, model: Type[BaseModel], **kwargs) -> "RuleSet":
        fields, required, enums = [], [], {}
        for name, info in model.model_fields.items():
            if name == "id":
                continue
            fields.append(name)
            if info.is_required():
                required.append(name)
            if get_origin(info.annotation) is Literal:
                enums[name] = tuple(str(v) for v in get_args(info.annotation))
        return cls(entity=entity, collection=collection, fields=tuple(fields),
                   required=tuple(required), enums=enums, **kwargs)

    def clean(self, payload: Any) -> Dict[str, Any]:
        """Keep only declared fields (plus ``id``), numbers cast to strings, text trimmed."""
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")
        out: Dict[str, Any] = {}
        for name in ("id",) + self.fields:
            if name not in payload:
                continue
            value = payload[name]
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                value = str(value)
            elif isinstance(value, str) and name not in self.write_only:
                value = value.strip()
            out[name] = value
        return out

    def check(self, record: Dict[str, Any]) -> None:
        if self.reference and _is_blank(record.get(self.reference.field)):
            raise ValidationError(f"{self.reference.field} is required", self.reference.field)
        for name in self.required:
            if _is_blank(record.get(name)):
                raise ValidationError(f"{name} is required", name)
        for name in ("id",) + self.fields:
            value = record.get(name)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{name} must be a string", name)
        for name, allowed in self.enums.items():
            value = record.get(name)
            if value is not None and value not in allowed:
                raise ValidationError(f"{name} must be one of: {', '.join(allowed)}", name)
        for name in self.dates:
            value = record.get(name)
            if value is None:
                continue
            try:
                parse_date(value)
            except ValueError:
                raise ValidationError(f"{name} must be an ISO-8601 date", name)

    def public(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in record.items() if k not in self.write_only}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_date(value: str) -> datetime:
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


# ---------- Rules per collection ----------
USER_RULES = RuleSet.from_model("User", "users", User, write_only=("pwd",))
TEACHER_RULES = RuleSet.from_model(
    "Teacher", "teachers", Teacher,
    reference=Reference("id", "users", copy=("name",)),
    id_policy=ID_REFERENCE,
)
STUDENT_RULES = RuleSet.from_model(
    "Student", "students", Student,
    reference=Reference("id", "users", copy=("name",)),
    unique=("studentId",),
    generated=("studentId",),
    id_policy=ID_REFERENCE,
)
PROFESSIONAL_RULES = RuleSet.from_model("Professional", "professionals", Professional, id_policy=ID_SHORT)
EVENT_RULES = RuleSet.from_model("Event", "events", Event, dates=("date",))
APPOINTMENT_RULES = RuleSet.from_model("Appointment", "appointments", Appointment, dates=("date",), id_policy=ID_UUID)

RULES: Dict[str, RuleSet] = {
    r.collection: r
    for r in (USER_RULES, TEACHER_RULES, STUDENT_RULES, PROFESSIONAL_RULES, EVENT_RULES, APPOINTMENT_RULES)
}
