"""
Data models module
Pydantic models for API request/response validation
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class IngestRequest(BaseModel):
    user_id: str = Field(description="Application user the point belongs to, stored as the user_id tag")
    measurement: str = Field(description="Measurement name, similar to a table in a relational database")
    field1: float = Field(description="Value of the field1 field")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "user1",
                "measurement": "measurement1",
                "field1": 1.0
            }
        }


class UserRequest(BaseModel):
    user_id: str = Field(description="Application user (not an InfluxDB user)")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "user1"
            }
        }


class QueryTable(BaseModel):
    metadata: Optional[List[Dict[str, Any]]] = Field(None, description="Column descriptors: label, datatype, group")
    records: List[Dict[str, Any]] = Field(default_factory=list, description="Column values of each record")


class QueryResponse(BaseModel):
    tables: List[QueryTable] = Field(default_factory=list, description="One entry per result table")


class TaskCreated(BaseModel):
    task_id: str = Field(description="ID of the created task; store it to manage the task later")


class HealthStatus(BaseModel):
    status: str = Field(description="Overall health status: 'healthy' or 'unhealthy'")
    timestamp: datetime = Field(description="UTC timestamp of health check")
    version: str = Field(description="API version")
    app: str = Field(description="Sample application name")
    influxdb_connected: bool = Field(description="True if InfluxDB answered ping")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2025-10-08T12:30:00Z",
                "version": "1.0.0",
                "app": "boilerplate",
                "influxdb_connected": True
            }
        }
