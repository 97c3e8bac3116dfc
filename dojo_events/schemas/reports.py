from pydantic import BaseModel, Field


class StatsOverviewOut(BaseModel):
    total_events: int = Field(serialization_alias="totalEvents")
    total_capacity: int = Field(serialization_alias="totalCapacity")
    total_registered: int = Field(serialization_alias="totalRegistered")
    total_confirmed: int = Field(serialization_alias="totalConfirmed")
