"""The form contract.

A form is any object with a ``tag``, a ``sequence_index``, a pure
``is_needed()`` predicate and a ``fields()`` serializer. Attachments
hold a reference to their parent return (``self.f1040``) and read its
lines through named accessors; they never look other forms up globally.
"""

from datetime import date
from typing import List, Optional, Protocol, Union, runtime_checkable

Field = Union[int, float, str, bool, date, None]


@runtime_checkable
class Form(Protocol):
    tag: str
    sequence_index: int

    def is_needed(self) -> bool:
        ...

    def fields(self) -> List[Field]:
        ...


class Attachment:
    """Shared plumbing for forms attached to a Form 1040: the parent
    reference and the header fields every attachment prints."""
    tag = ""
    sequence_index = 0

    def __init__(self, f1040):
        self.f1040 = f1040

    @property
    def info(self):
        return self.f1040.info

    def header_fields(self) -> List[Field]:
        """Name(s) shown on return and the primary SSN."""
        return [self.f1040.names_string(), self.f1040.info.taxpayer.primary.ssn]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} tag={self.tag!r}>"


def date_text(value: Optional[date]) -> Union[date, str]:
    """Date lines default to blank text, never to an error."""
    return value if value is not None else ""
