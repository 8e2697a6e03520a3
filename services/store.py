"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  PMS - Store                                                                 ║
║                                                                              ║
║  One narrow repository per collection, bundled in a MongoStore.              ║
║  Services only talk to these repositories, never to db.<collection>,         ║
║  so tests can swap in an in-memory store with the same contract.             ║
║                                                                              ║
║  Documents: string "id" (uuid4), ISO "created_at", "_id" never returned.     ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from config import now_iso

logger = logging.getLogger("store")

NO_ID = {"_id": 0}


@dataclass
class LeadQuery:
    """Filter over the leads collection. Unset fields do not filter."""
    hospital_id: Optional[str] = None
    partner_id: Optional[str] = None
    sales_person_id: Optional[str] = None
    created_by_id: Optional[str] = None
    status: Optional[str] = None
    exclude_statuses: List[str] = field(default_factory=list)
    specialisation: Optional[str] = None
    created_from: Optional[str] = None
    created_to: Optional[str] = None
    created_before: Optional[str] = None  # exclusive
    include_deleted: bool = False

    def to_filter(self) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if not self.include_deleted:
            query["is_deleted"] = False
        for key in ("hospital_id", "partner_id", "sales_person_id", "created_by_id", "specialisation"):
            value = getattr(self, key)
            if value is not None:
                query[key] = value

        status_filter: Dict[str, Any] = {}
        if self.exclude_statuses:
            status_filter["$nin"] = list(self.exclude_statuses)
        if self.status is not None:
            if status_filter:
                status_filter["$eq"] = self.status
            else:
                status_filter = self.status
        if status_filter:
            query["status"] = status_filter

        if self.created_from or self.created_to or self.created_before:
            date_query = {}
            if self.created_from:
                date_query["$gte"] = self.created_from
            if self.created_to:
                date_query["$lte"] = self.created_to
            if self.created_before:
                date_query["$lt"] = self.created_before
            query["created_at"] = date_query
        return query


# ════════════════════════════════════════════════════════════════════════
# REPOSITORIES
# ════════════════════════════════════════════════════════════════════════

class UserRepository:
    def __init__(self, collection):
        self.col = collection

    async def get(self, user_id: str) -> Optional[dict]:
        return await self.col.find_one({"id": user_id}, {"_id": 0, "password": 0})

    async def get_many(self, user_ids) -> Dict[str, dict]:
        ids = [i for i in set(user_ids) if i]
        if not ids:
            return {}
        users = await self.col.find({"id": {"$in": ids}}, {"_id": 0, "password": 0}).to_list(None)
        return {u["id"]: u for u in users}

    async def list_active(self, role: str, hospital_id: str) -> List[dict]:
        """Active users of a role in a hospital, oldest account first"""
        return await self.col.find(
            {"role": role, "hospital_id": hospital_id, "is_active": True},
            {"_id": 0, "password": 0}
        ).sort([("created_at", ASCENDING), ("id", ASCENDING)]).to_list(None)

    async def move_hospital(self, role: str, from_hospital_id: str, to_hospital_id: str, session=None) -> int:
        result = await self.col.update_many(
            {"role": role, "hospital_id": from_hospital_id},
            {"$set": {"hospital_id": to_hospital_id, "updated_at": now_iso()}},
            session=session
        )
        return result.modified_count

    async def deactivate(self, user_id: str) -> bool:
        result = await self.col.update_one(
            {"id": user_id},
            {"$set": {"is_active": False, "updated_at": now_iso()}}
        )
        return result.matched_count > 0

    async def delete(self, user_id: str, session=None) -> int:
        result = await self.col.delete_one({"id": user_id}, session=session)
        return result.deleted_count


class SessionRepository:
    def __init__(self, collection):
        self.col = collection

    async def get_active(self, token: str, now: str) -> Optional[dict]:
        return await self.col.find_one({"token": token, "expires_at": {"$gt": now}}, NO_ID)


class HospitalRepository:
    def __init__(self, collection):
        self.col = collection

    async def get(self, hospital_id: str) -> Optional[dict]:
        return await self.col.find_one({"id": hospital_id}, NO_ID)

    async def get_many(self, hospital_ids) -> Dict[str, dict]:
        ids = [i for i in set(hospital_ids) if i]
        if not ids:
            return {}
        hospitals = await self.col.find({"id": {"$in": ids}}, NO_ID).to_list(None)
        return {h["id"]: h for h in hospitals}

    async def deactivate(self, hospital_id: str) -> bool:
        result = await self.col.update_one(
            {"id": hospital_id},
            {"$set": {"is_active": False, "updated_at": now_iso()}}
        )
        return result.matched_count > 0


class LeadRepository:
    def __init__(self, collection):
        self.col = collection

    async def insert(self, doc: dict) -> dict:
        await self.col.insert_one(dict(doc))
        return doc

    async def insert_many(self, docs: List[dict]) -> int:
        if not docs:
            return 0
        result = await self.col.insert_many([dict(d) for d in docs])
        return len(result.inserted_ids)

    async def get(self, lead_id: str) -> Optional[dict]:
        return await self.col.find_one({"id": lead_id}, NO_ID)

    async def find_active_by_phone(self, phone: str) -> Optional[dict]:
        return await self.col.find_one({"phone": phone, "is_deleted": False}, NO_ID)

    async def latest_assigned(self, hospital_id: str) -> Optional[dict]:
        """Most recently created lead of the hospital that has a sales person"""
        cursor = self.col.find(
            {"hospital_id": hospital_id, "sales_person_id": {"$ne": None}},
            NO_ID
        ).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).limit(1)
        leads = await cursor.to_list(1)
        return leads[0] if leads else None

    async def update(self, lead_id: str, fields: Dict[str, Any]) -> Optional[dict]:
        return await self.col.find_one_and_update(
            {"id": lead_id},
            {"$set": fields},
            projection=NO_ID,
            return_document=ReturnDocument.AFTER
        )

    async def delete(self, lead_id: str) -> int:
        result = await self.col.delete_one({"id": lead_id})
        return result.deleted_count

    async def find(self, query: LeadQuery, limit: Optional[int] = None) -> List[dict]:
        cursor = self.col.find(query.to_filter(), NO_ID).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        return await cursor.to_list(limit)

    async def count(self, query: LeadQuery) -> int:
        return await self.col.count_documents(query.to_filter())

    async def sum_points(self, query: LeadQuery) -> int:
        pipeline = [
            {"$match": query.to_filter()},
            {"$group": {"_id": None, "total": {"$sum": "$points"}}},
        ]
        result = await self.col.aggregate(pipeline).to_list(1)
        return result[0]["total"] if result else 0

    async def move_hospital(self, from_hospital_id: str, to_hospital_id: str, session=None) -> int:
        result = await self.col.update_many(
            {"hospital_id": from_hospital_id},
            {"$set": {"hospital_id": to_hospital_id}},
            session=session
        )
        return result.modified_count

    async def move_creator(self, from_user_id: str, to_user_id: str, session=None) -> int:
        result = await self.col.update_many(
            {"created_by_id": from_user_id},
            {"$set": {"created_by_id": to_user_id}},
            session=session
        )
        return result.modified_count


class LeadDocumentRepository:
    def __init__(self, collection):
        self.col = collection

    async def insert(self, doc: dict) -> dict:
        await self.col.insert_one(dict(doc))
        return doc

    async def list_for_lead(self, lead_id: str) -> List[dict]:
        return await self.col.find({"lead_id": lead_id}, NO_ID).sort("created_at", ASCENDING).to_list(None)

    async def delete_for_lead(self, lead_id: str) -> int:
        result = await self.col.delete_many({"lead_id": lead_id})
        return result.deleted_count


class LeadRemarkRepository:
    def __init__(self, collection):
        self.col = collection

    async def insert(self, doc: dict) -> dict:
        await self.col.insert_one(dict(doc))
        return doc

    async def list_for_lead(self, lead_id: str) -> List[dict]:
        return await self.col.find({"lead_id": lead_id}, NO_ID).sort(
            [("created_at", ASCENDING), ("_id", ASCENDING)]
        ).to_list(None)


class PartnerPointsRepository:
    def __init__(self, collection):
        self.col = collection

    async def upsert(self, partner_id: str, status: str, points: int, approval_status: str) -> dict:
        """One row per (partner_id, status); unique index enforces it"""
        now = now_iso()
        return await self.col.find_one_and_update(
            {"partner_id": partner_id, "status": status},
            {
                "$set": {"points": points, "approval_status": approval_status, "updated_at": now},
                "$setOnInsert": {"id": str(uuid.uuid4()), "created_at": now},
            },
            upsert=True,
            projection=NO_ID,
            return_document=ReturnDocument.AFTER
        )

    async def get(self, entry_id: str) -> Optional[dict]:
        return await self.col.find_one({"id": entry_id}, NO_ID)

    async def find(self, partner_id: str, status: str) -> Optional[dict]:
        return await self.col.find_one({"partner_id": partner_id, "status": status}, NO_ID)

    async def list_for_partner(self, partner_id: str) -> List[dict]:
        return await self.col.find({"partner_id": partner_id}, NO_ID).sort("status", ASCENDING).to_list(None)

    async def list_by_approval(self, approval_status: str) -> List[dict]:
        return await self.col.find({"approval_status": approval_status}, NO_ID).sort(
            "created_at", ASCENDING
        ).to_list(None)

    async def set_approval(self, entry_id: str, approval_status: str) -> Optional[dict]:
        return await self.col.find_one_and_update(
            {"id": entry_id},
            {"$set": {"approval_status": approval_status, "updated_at": now_iso()}},
            projection=NO_ID,
            return_document=ReturnDocument.AFTER
        )


class EventRepository:
    def __init__(self, collection):
        self.col = collection

    async def insert(self, doc: dict) -> dict:
        await self.col.insert_one(dict(doc))
        return doc


# ════════════════════════════════════════════════════════════════════════
# STORE
# ════════════════════════════════════════════════════════════════════════

class MongoStore:
    def __init__(self, client, db):
        self.client = client
        self.db = db
        self.users = UserRepository(db.users)
        self.sessions = SessionRepository(db.sessions)
        self.hospitals = HospitalRepository(db.hospitals)
        self.leads = LeadRepository(db.leads)
        self.documents = LeadDocumentRepository(db.lead_documents)
        self.remarks = LeadRemarkRepository(db.lead_remarks)
        self.partner_points = PartnerPointsRepository(db.partner_points)
        self.events = EventRepository(db.event_log)

    @asynccontextmanager
    async def transaction(self):
        """
        Multi-document transaction (requires a replica set).
        Yields the session; repository writes accept it as `session=`.
        """
        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session

    async def ensure_indexes(self):
        await self.users.col.create_index("id", unique=True)
        await self.users.col.create_index([("hospital_id", ASCENDING), ("role", ASCENDING)])
        await self.sessions.col.create_index("token")
        await self.sessions.col.create_index("expires_at")
        await self.hospitals.col.create_index("id", unique=True)
        await self.leads.col.create_index("id", unique=True)
        await self.leads.col.create_index("phone")
        await self.leads.col.create_index([("hospital_id", ASCENDING), ("created_at", DESCENDING)])
        await self.leads.col.create_index("partner_id")
        await self.documents.col.create_index("lead_id")
        await self.remarks.col.create_index("lead_id")
        await self.partner_points.col.create_index(
            [("partner_id", ASCENDING), ("status", ASCENDING)], unique=True
        )
        await self.partner_points.col.create_index("approval_status")
        logger.info("[STORE] MongoDB indexes ensured")


_store: Optional[MongoStore] = None


def get_store() -> MongoStore:
    """FastAPI dependency: process-wide store over config.db"""
    global _store
    if _store is None:
        from config import client, db
        _store = MongoStore(client, db)
    return _store
