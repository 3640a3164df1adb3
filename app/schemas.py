"""
Pydantic schemas for API request models
"""
from pydantic import BaseModel
from typing import List, Optional


# ===== BULK COLLECTION SCHEMAS =====

class BulkCollectionRequest(BaseModel):
    """Body of POST /api/bulk-champion-stats; omitted fields use the defaults (an empty patch list too)"""
    patches: Optional[List[str]] = None
    ranks: Optional[List[str]] = None
    regions: Optional[List[str]] = None
