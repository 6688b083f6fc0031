from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CategorySchema(BaseModel):
    id: int
    categoria: str


class ServiceSchema(BaseModel):
    id: int
    servico: str
    descricao: str | None = None
    tempo: int | None = None
    valor: float | None = None


class AvailableHourSchema(BaseModel):
    schedule: int
    professionals: list[int] = Field(default_factory=list)


class ProfessionalSchema(BaseModel):
    id: int
    nome: str


class CategoriesData(BaseModel):
    categories: list[CategorySchema] = Field(default_factory=list)


class ServicesData(BaseModel):
    salonServices: list[ServiceSchema] = Field(default_factory=list)


class AvailableHoursData(BaseModel):
    available: list[AvailableHourSchema] = Field(default_factory=list)
    interval: str | None = None
    service_time: int | None = None


class ProfessionalsData(BaseModel):
    professionals: list[ProfessionalSchema] = Field(default_factory=list)


class ReservationData(BaseModel):
    bookings: list[dict[str, Any]] = Field(default_factory=list)


class ApiEnvelope(BaseModel):
    """Every booking API answer: {code, data}. code == 200 means success."""

    code: int
    data: dict[str, Any] | None = None


class CategoriesResponse(ApiEnvelope):
    data: CategoriesData = Field(default_factory=CategoriesData)


class ServicesResponse(ApiEnvelope):
    data: ServicesData = Field(default_factory=ServicesData)


class AvailableHoursResponse(ApiEnvelope):
    data: AvailableHoursData = Field(default_factory=AvailableHoursData)


class ProfessionalsResponse(ApiEnvelope):
    data: ProfessionalsData = Field(default_factory=ProfessionalsData)


class ReservationResponse(ApiEnvelope):
    data: ReservationData = Field(default_factory=ReservationData)
