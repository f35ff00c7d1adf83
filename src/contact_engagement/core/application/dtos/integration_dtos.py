from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from contact_engagement.core.domain.events.exceptions import InvalidInputError

DEFAULT_GESTAOCLICK_BASE_URL = "https://api.beteltecnologia.com/api"


class IntegrationCredentials(BaseModel):
    """
    Credenciais validadas de uma integração GestaoClick.

    Construídas uma única vez a partir do `json_content` da integração;
    erros viram `InvalidInputError` aqui e não no ponto de uso.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    access_token: str = Field(alias="gcAccessToken", min_length=1)
    secret_token: str = Field(alias="gcSecretToken", min_length=1)
    base_url: str = Field(default=DEFAULT_GESTAOCLICK_BASE_URL, alias="gcBaseUrl")

    @field_validator("access_token", "secret_token", mode="before")
    @classmethod
    def _strip_tokens(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("base_url", mode="before")
    @classmethod
    def _normalize_base_url(cls, v):
        value = str(v or "").strip().rstrip("/")
        return value or DEFAULT_GESTAOCLICK_BASE_URL

    @classmethod
    def from_json_content(cls, json_content: str | None) -> IntegrationCredentials:
        if not json_content:
            raise InvalidInputError("Tokens da Gestao Click não configurados.")
        try:
            raw = json.loads(json_content)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("Configuração da integração não é um JSON válido.") from exc
        if not isinstance(raw, dict):
            raise InvalidInputError("Configuração da integração não é um objeto JSON.")
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise InvalidInputError("Tokens da Gestao Click não configurados.") from exc
