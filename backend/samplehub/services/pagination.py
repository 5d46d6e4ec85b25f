"""
Listing helper shared by principal and catalog collections.
"""
import math
from datetime import datetime, timezone
from typing import Any, Callable, Literal, Optional

from motor.motor_asyncio import AsyncIOMotorCollection

from samplehub.core.exceptions import InvalidRequest

DeletedFilter = Literal["NO", "YES", "BOTH"]


def deleted_query(deleted: DeletedFilter) -> dict[str, Any]:
    if deleted == "BOTH":
        return {}
    return {"is_deleted": deleted == "YES"}


def parse_timestamp(timestamp: Optional[str]) -> Optional[datetime]:
    """
    Parse the client's listing snapshot time.

    Unparseable values are ignored, matching a listing without snapshot.
    Returned as naive UTC, the form MongoDB hands back.
    """
    if not timestamp:
        return None
    try:
        parsed = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


async def paginate(
    collection: AsyncIOMotorCollection,
    query: dict[str, Any],
    *,
    page: int = 1,
    limit: int = 10,
    timestamp: Optional[str] = None,
    projection: Optional[dict[str, Any]] = None,
    serialize: Callable[[dict[str, Any]], dict[str, Any]],
    label: str,
    plural: Optional[str] = None,
) -> dict[str, Any]:
    """
    List documents newest first.

    Documents created after `timestamp` are left out of the page and only
    counted in `latest_count`, so a client paging through a snapshot is not
    shifted by new inserts. A `limit` of -1 returns everything.

    Returns:
        Dict with message, current_page, results, latest_count,
        total_count and total_pages
    """
    if page < 1 or (limit < 1 and limit != -1):
        raise InvalidRequest("Provide a valid page and limit")

    snapshot = parse_timestamp(timestamp)
    listed = dict(query)
    if snapshot is not None:
        listed["created_at"] = {"$lte": snapshot}

    cursor = collection.find(listed, projection).sort([("created_at", -1), ("_id", -1)])
    if limit != -1:
        cursor = cursor.skip(limit * (page - 1)).limit(limit)
    documents = await cursor.to_list(length=None)

    total_count = await collection.count_documents(listed)
    latest_count = 0
    if snapshot is not None:
        latest_count = await collection.count_documents(
            {**query, "created_at": {"$gt": snapshot}}
        )

    if limit == -1:
        total_pages = 1 if total_count else 0
    else:
        total_pages = math.ceil(total_count / limit)

    return {
        "message": f"{plural or label + 's'} fetched" if documents else f"{label} is empty",
        "current_page": page,
        "results": [serialize(document) for document in documents],
        "latest_count": latest_count,
        "total_count": total_count,
        "total_pages": total_pages,
    }
