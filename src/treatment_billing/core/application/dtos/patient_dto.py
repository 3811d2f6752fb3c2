from pydantic import BaseModel, Field, field_validator


class PatientDTO(BaseModel):
    """Dados de cadastro (ficha de entrada) de um paciente."""
    name: str = Field(min_length=1, max_length=255)
    phone_number: str = Field(min_length=1, max_length=32)
    address: str | None = None
    age: int | None = Field(default=None, ge=0, le=150)
    branch_name: str | None = None

    @field_validator("name", "phone_number")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("não pode ser vazio")
        return value


class PatientUpdateDTO(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, min_length=1, max_length=32)
    address: str | None = None
    age: int | None = Field(default=None, ge=0, le=150)
    branch_name: str | None = None
