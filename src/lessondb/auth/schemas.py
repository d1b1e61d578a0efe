"""Validated auth input."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr


class EmailInput(BaseModel):
    email: EmailStr
