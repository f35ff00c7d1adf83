from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from contact_engagement.core.domain.entities.contact_entity import ExternalPage, ExternalRecord

logger = structlog.get_logger(__name__)

# ───────────────────────────────────────────────
# DTOs para integração com a API GestaoClick
# ───────────────────────────────────────────────

_INACTIVE_FLAGS = {"0", "false", "nao", "não", "inativo"}


class GestaoClickMetaDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_registros: int | None = None
    total_paginas: int | None = None
    total_registros_pagina: int | None = None
    pagina_atual: int | None = None
    limite_por_pagina: int | None = None
    proxima_pagina: int | None = None


class GestaoClickClienteDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    nome: str = ""
    data_nascimento: str = ""
    telefone: str = ""
    celular: str = ""
    email: str | None = None
    ativo: str | None = None

    @field_validator("ativo", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return None if v is None else str(v)

    @field_validator("id", "nome", "data_nascimento", "telefone", "celular", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return "" if v is None else str(v)

    def to_external_record(self) -> ExternalRecord:
        active = (self.ativo or "1").strip().lower() not in _INACTIVE_FLAGS
        return ExternalRecord(
            external_id=self.id,
            raw_name=self.nome,
            # celular tem prioridade sobre o fixo
            raw_phone_candidates=(self.celular, self.telefone),
            raw_birth_date=self.data_nascimento,
            active=active,
        )


class GestaoClickResponseDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int | None = None
    status: str | None = None
    meta: GestaoClickMetaDTO | None = None
    # registros validados um a um: um cliente malformado não derruba a página
    data: list[Any] | None = None

    def clientes(self) -> list[GestaoClickClienteDTO]:
        parsed: list[GestaoClickClienteDTO] = []
        for idx, raw in enumerate(self.data or []):
            if not isinstance(raw, dict):
                logger.warning("gestaoclick.record_skipped", index=idx, reason="not_an_object")
                continue
            try:
                parsed.append(GestaoClickClienteDTO.model_validate(raw))
            except ValidationError as exc:
                logger.warning("gestaoclick.record_skipped", index=idx, reason="invalid", error=str(exc))
        return parsed

    def to_page(self) -> ExternalPage:
        return ExternalPage(
            records=[c.to_external_record() for c in self.clientes()],
            total_pages=self.meta.total_paginas if self.meta else None,
        )


class GestaoClickLojasResponseDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: int | None = None
    status: str | None = None
    data: list[dict] | None = None
