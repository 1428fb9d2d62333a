from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class LoginIn(BaseModel):
    officer_id: Optional[str] = Field(default=None, max_length=64)
    scanner_id: Optional[str] = Field(default=None, max_length=64)
