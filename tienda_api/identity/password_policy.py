"""
===============================================================================
TARJETA CRC — identity/password_policy.py
===============================================================================

Módulo:
    Política de contraseñas configurable

Responsabilidades:
    - Evaluar un password contra la política (longitud mínima + requisitos opcionales).
    - Reportar TODAS las violaciones.
    - Calcular un reporte de fortaleza (score 0–5).

Colaboradores:
    - crosscutting/config.py: flags password_* (por defecto solo longitud mínima).
    - infrastructure/repositories/in_memory/user.py: alta y cambio de password.
===============================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..crosscutting.config import Settings

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")
_SPECIAL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


@dataclass(frozen=True, slots=True)
class PasswordStrength:
    length: bool
    has_uppercase: bool
    has_lowercase: bool
    has_digit: bool
    has_special: bool

    @property
    def score(self) -> int:
        return sum(
            (
                self.length,
                self.has_uppercase,
                self.has_lowercase,
                self.has_digit,
                self.has_special,
            )
        )


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    min_length: int = 6
    require_uppercase: bool = False
    require_lowercase: bool = False
    require_digit: bool = False
    require_special: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> PasswordPolicy:
        return cls(
            min_length=settings.password_min_length,
            require_uppercase=settings.password_require_uppercase,
            require_lowercase=settings.password_require_lowercase,
            require_digit=settings.password_require_digit,
            require_special=settings.password_require_special,
        )

    def strength(self, password: str) -> PasswordStrength:
        return PasswordStrength(
            length=len(password) >= self.min_length,
            has_uppercase=bool(_UPPER.search(password)),
            has_lowercase=bool(_LOWER.search(password)),
            has_digit=bool(_DIGIT.search(password)),
            has_special=bool(_SPECIAL.search(password)),
        )

    def violations(self, password: str | None) -> list[str]:
        if not isinstance(password, str):
            return [f"La contraseña debe tener al menos {self.min_length} caracteres"]

        report = self.strength(password)
        errors: list[str] = []
        if not report.length:
            errors.append(f"La contraseña debe tener al menos {self.min_length} caracteres")
        if self.require_uppercase and not report.has_uppercase:
            errors.append("La contraseña debe incluir una mayúscula")
        if self.require_lowercase and not report.has_lowercase:
            errors.append("La contraseña debe incluir una minúscula")
        if self.require_digit and not report.has_digit:
            errors.append("La contraseña debe incluir un número")
        if self.require_special and not report.has_special:
            errors.append("La contraseña debe incluir un carácter especial")
        return errors
