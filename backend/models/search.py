"""Pydantic schemas for Serper web-search responses."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class OrganicResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    link: str = ""
    snippet: str = ""
    position: Optional[int] = None


class KnowledgeGraph(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    type: Optional[str] = None
    description: Optional[str] = None
    attributes: dict[str, str] = {}


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    organic: list[OrganicResult] = []
    knowledge_graph: Optional[KnowledgeGraph] = Field(None, alias="knowledgeGraph")
