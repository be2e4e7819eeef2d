from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from job_harvester.errors import JobValidationError
from job_harvester.taxonomy import is_valid_category, is_valid_sub_category

REQUIRED_FIELDS = ("title", "role", "company", "category", "sub_category", "apply_link")

LIST_FIELDS = ("skills", "employment_type", "job_type", "education", "location", "batch")
INT_FIELDS = ("experience_min", "experience_max", "salary_min", "salary_max")


def camel_case(name: str) -> str:
    """sub_category -> subCategory"""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _aliases(name: str) -> AliasChoices:
    return AliasChoices(name, camel_case(name))


class JobRecord(BaseModel):
    """
    Structured job posting as it is persisted.
    Accepts both snake_case and camelCase keys on input.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    role: str = Field(min_length=1)
    company: str = Field(min_length=1)
    category: str = Field(min_length=1)
    sub_category: str = Field(min_length=1, validation_alias=_aliases("sub_category"))
    skills: list[str] = Field(default_factory=list)
    employment_type: list[str] = Field(
        default_factory=list, validation_alias=_aliases("employment_type")
    )
    job_type: list[str] = Field(default_factory=list, validation_alias=_aliases("job_type"))
    education: list[str] = Field(default_factory=list)
    location: list[str] = Field(default_factory=list)
    batch: list[str] = Field(default_factory=list)
    experience_min: int = Field(default=0, ge=0, validation_alias=_aliases("experience_min"))
    experience_max: int = Field(default=0, ge=0, validation_alias=_aliases("experience_max"))
    salary_min: int = Field(default=0, ge=0, validation_alias=_aliases("salary_min"))
    salary_max: int = Field(default=0, ge=0, validation_alias=_aliases("salary_max"))
    apply_link: str = Field(min_length=1, validation_alias=_aliases("apply_link"))
    job_id: int | None = Field(default=None, validation_alias=_aliases("job_id"))
    message: str | None = None
    created_at: datetime | None = Field(default=None, validation_alias=_aliases("created_at"))

    @field_validator(*LIST_FIELDS, mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return value

    @field_validator(*INT_FIELDS, mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> Any:
        if value is None or value == "":
            return 0
        return value

    @field_validator("job_id", mode="before")
    @classmethod
    def _coerce_job_id(cls, value: Any) -> Any:
        # Extraction output often carries a non-numeric or empty id
        if value in (None, ""):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class PostingFragment(BaseModel):
    """
    One raw job advertisement as returned by a content source.
    `text` is the flattened posting body handed to the extraction service.
    """

    source: str
    text: str | None = None
    link: str | None = None
    post_id: str | None = None


def _lookup(candidate: dict[str, Any], name: str) -> Any:
    if name in candidate:
        return candidate[name]
    return candidate.get(camel_case(name))


STORE_ASSIGNED = ("created_at", "createdAt")


def validate_job(candidate: Any) -> JobRecord:
    """
    Validate a candidate record against the job-record shape and taxonomy.

    Raises JobValidationError with reason "missing_field" when a required field
    is absent or blank, "invalid_category" when category or sub-category is not
    part of the taxonomy, and "invalid_value" for any other type or range error.
    """
    if not isinstance(candidate, dict):
        raise JobValidationError(
            "missing_field", "Candidate is not an object", payload=candidate
        )

    for name in REQUIRED_FIELDS:
        value = _lookup(candidate, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise JobValidationError(
                "missing_field",
                f"Missing required field '{name}'",
                field=name,
                payload=candidate,
            )

    category = _lookup(candidate, "category")
    sub_category = _lookup(candidate, "sub_category")
    if isinstance(category, str) and isinstance(sub_category, str):
        category, sub_category = category.strip(), sub_category.strip()
        if not is_valid_category(category):
            raise JobValidationError(
                "invalid_category",
                f"Unknown category '{category}'",
                field="category",
                payload=candidate,
            )
        if not is_valid_sub_category(category, sub_category):
            raise JobValidationError(
                "invalid_category",
                f"Sub-category '{sub_category}' does not belong to '{category}'",
                field="sub_category",
                payload=candidate,
            )

    # created_at is assigned by the store at insert time
    data = {key: value for key, value in candidate.items() if key not in STORE_ASSIGNED}
    try:
        return JobRecord.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise JobValidationError(
            "invalid_value",
            f"Invalid value for '{field}': {first['msg']}",
            field=field,
            payload=candidate,
        ) from e
