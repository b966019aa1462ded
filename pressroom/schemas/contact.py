"""
Pressroom Backend: Contact Form Schema
======================================

What:  The project brief submitted through POST /send-email.
How:   Field aliases keep the public form names used by the existing frontend
       (`nome`, `telefone`, `claridadFormato`, ...). Fields default to None so a
       missing field is reported as a 400 by ContactService rather than as a
       framework-level error.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# one address, no whitespace or control characters (it becomes the Reply-To header)
EMAIL_PATTERN = re.compile(r"[^@\s\x00-\x1f\x7f]+@[^@\s\x00-\x1f\x7f]+\.[^@\s\x00-\x1f\x7f]+")


class ContactForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, alias="nome")
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, alias="telefone")
    format_clarity: Optional[str] = Field(default=None, alias="claridadFormato")
    idea_flow: Optional[str] = Field(default=None, alias="flowIdea")
    due_date: Optional[str] = Field(default=None, alias="fechaEntrega")

    def missing_fields(self) -> List[str]:
        """Form names (aliases) of every field that is absent or blank."""
        missing = []
        for field_name, info in type(self).model_fields.items():
            value = getattr(self, field_name)
            if value is None or not value.strip():
                missing.append(info.alias or field_name)
        return missing

    def has_valid_email(self) -> bool:
        return self.email is not None and EMAIL_PATTERN.fullmatch(self.email.strip()) is not None
