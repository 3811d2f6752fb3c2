import datetime as dt

from pydantic import BaseModel


class RescheduleDTO(BaseModel):
    new_date: dt.date
