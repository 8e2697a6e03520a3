"""
In-memory store with the same repository contract as services.store.MongoStore.
Rows are kept in insertion order; every read returns copies.
"""

import copy
import uuid
from contextlib import asynccontextmanager
from typing import Optional, List, Dict, Any

from config import now_iso
from services.store import LeadQuery


class _Table:
    def __init__(self):
        self.rows: List[dict] = []

    def _find_index(self, **match) -> Optional[int]:
        for i, row in enumerate(self.rows):
            if all(row.get(k) == v for k, v in match.items()):
                return i
        return None

    def _first(self, **match) -> Optional[dict]:
        i = self._find_index(**match)
        return copy.deepcopy(self.rows[i]) if i is not None else None

    async def insert(self, doc: dict) -> dict:
        self.rows.append(copy.deepcopy(doc))
        return doc


class MemoryUsers(_Table):
    async def get(self, user_id: str) -> Optional[dict]:
        user = self._first(id=user_id)
        if user:
            user.pop("password", None)
        return user

    async def get_many(self, user_ids) -> Dict[str, dict]:
        ids = set(i for i in user_ids if i)
        users = {r["id"]: copy.deepcopy(r) for r in self.rows if r["id"] in ids}
        for user in users.values():
            user.pop("password", None)
        return users

    async def list_active(self, role: str, hospital_id: str) -> List[dict]:
        active = [
            r for r in self.rows
            if r.get("role") == role and r.get("hospital_id") == hospital_id and r.get("is_active")
        ]
        return copy.deepcopy(sorted(active, key=lambda r: (r.get("created_at", ""), r["id"])))

    async def move_hospital(self, role: str, from_hospital_id: str, to_hospital_id: str, session=None) -> int:
        moved = 0
        for row in self.rows:
            if row.get("role") == role and row.get("hospital_id") == from_hospital_id:
                row["hospital_id"] = to_hospital_id
                moved += 1
        return moved

    async def deactivate(self, user_id: str) -> bool:
        i = self._find_index(id=user_id)
        if i is None:
            return False
        self.rows[i]["is_active"] = False
        return True

    async def delete(self, user_id: str, session=None) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["id"] != user_id]
        return before - len(self.rows)


class MemorySessions(_Table):
    async def get_active(self, token: str, now: str) -> Optional[dict]:
        for row in self.rows:
            if row["token"] == token and row["expires_at"] > now:
                return copy.deepcopy(row)
        return None


class MemoryHospitals(_Table):
    async def get(self, hospital_id: str) -> Optional[dict]:
        return self._first(id=hospital_id)

    async def get_many(self, hospital_ids) -> Dict[str, dict]:
        ids = set(i for i in hospital_ids if i)
        return {r["id"]: copy.deepcopy(r) for r in self.rows if r["id"] in ids}

    async def deactivate(self, hospital_id: str) -> bool:
        i = self._find_index(id=hospital_id)
        if i is None:
            return False
        self.rows[i]["is_active"] = False
        return True


def lead_matches(query: LeadQuery, lead: dict) -> bool:
    if not query.include_deleted and lead.get("is_deleted"):
        return False
    for key in ("hospital_id", "partner_id", "sales_person_id", "created_by_id", "specialisation"):
        value = getattr(query, key)
        if value is not None and lead.get(key) != value:
            return False
    if query.status is not None and lead.get("status") != query.status:
        return False
    if lead.get("status") in query.exclude_statuses:
        return False
    if query.created_from and lead.get("created_at", "") < query.created_from:
        return False
    if query.created_to and lead.get("created_at", "") > query.created_to:
        return False
    if query.created_before and lead.get("created_at", "") >= query.created_before:
        return False
    return True


class MemoryLeads(_Table):
    def _newest_first(self, rows) -> List[dict]:
        indexed = sorted(
            ((r.get("created_at", ""), i, r) for i, r in enumerate(rows)),
            key=lambda t: (t[0], t[1]),
            reverse=True
        )
        return [copy.deepcopy(r) for _, _, r in indexed]

    async def insert_many(self, docs: List[dict]) -> int:
        for doc in docs:
            await self.insert(doc)
        return len(docs)

    async def get(self, lead_id: str) -> Optional[dict]:
        return self._first(id=lead_id)

    async def find_active_by_phone(self, phone: str) -> Optional[dict]:
        return self._first(phone=phone, is_deleted=False)

    async def latest_assigned(self, hospital_id: str) -> Optional[dict]:
        assigned = [
            r for r in self.rows
            if r.get("hospital_id") == hospital_id and r.get("sales_person_id") is not None
        ]
        newest = self._newest_first(assigned)
        return newest[0] if newest else None

    async def update(self, lead_id: str, fields: Dict[str, Any]) -> Optional[dict]:
        i = self._find_index(id=lead_id)
        if i is None:
            return None
        self.rows[i].update(copy.deepcopy(fields))
        return copy.deepcopy(self.rows[i])

    async def delete(self, lead_id: str) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["id"] != lead_id]
        return before - len(self.rows)

    async def find(self, query: LeadQuery, limit: Optional[int] = None) -> List[dict]:
        leads = self._newest_first([r for r in self.rows if lead_matches(query, r)])
        return leads[:limit] if limit else leads

    async def count(self, query: LeadQuery) -> int:
        return sum(1 for r in self.rows if lead_matches(query, r))

    async def sum_points(self, query: LeadQuery) -> int:
        return sum(r.get("points", 0) for r in self.rows if lead_matches(query, r))

    async def move_hospital(self, from_hospital_id: str, to_hospital_id: str, session=None) -> int:
        moved = 0
        for row in self.rows:
            if row.get("hospital_id") == from_hospital_id:
                row["hospital_id"] = to_hospital_id
                moved += 1
        return moved

    async def move_creator(self, from_user_id: str, to_user_id: str, session=None) -> int:
        moved = 0
        for row in self.rows:
            if row.get("created_by_id") == from_user_id:
                row["created_by_id"] = to_user_id
                moved += 1
        return moved


class MemoryDocuments(_Table):
    async def list_for_lead(self, lead_id: str) -> List[dict]:
        return [copy.deepcopy(r) for r in self.rows if r["lead_id"] == lead_id]

    async def delete_for_lead(self, lead_id: str) -> int:
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["lead_id"] != lead_id]
        return before - len(self.rows)


class MemoryRemarks(_Table):
    async def list_for_lead(self, lead_id: str) -> List[dict]:
        return [copy.deepcopy(r) for r in self.rows if r["lead_id"] == lead_id]


class MemoryPartnerPoints(_Table):
    async def upsert(self, partner_id: str, status: str, points: int, approval_status: str) -> dict:
        now = now_iso()
        i = self._find_index(partner_id=partner_id, status=status)
        if i is None:
            self.rows.append({
                "id": str(uuid.uuid4()),
                "partner_id": partner_id,
                "status": status,
                "created_at": now,
            })
            i = len(self.rows) - 1
        self.rows[i].update({"points": points, "approval_status": approval_status, "updated_at": now})
        return copy.deepcopy(self.rows[i])

    async def get(self, entry_id: str) -> Optional[dict]:
        return self._first(id=entry_id)

    async def find(self, partner_id: str, status: str) -> Optional[dict]:
        return self._first(partner_id=partner_id, status=status)

    async def list_for_partner(self, partner_id: str) -> List[dict]:
        rows = [r for r in self.rows if r["partner_id"] == partner_id]
        return copy.deepcopy(sorted(rows, key=lambda r: r["status"]))

    async def list_by_approval(self, approval_status: str) -> List[dict]:
        return [copy.deepcopy(r) for r in self.rows if r["approval_status"] == approval_status]

    async def set_approval(self, entry_id: str, approval_status: str) -> Optional[dict]:
        i = self._find_index(id=entry_id)
        if i is None:
            return None
        self.rows[i]["approval_status"] = approval_status
        return copy.deepcopy(self.rows[i])


class MemoryEvents(_Table):
    pass


class MemoryStore:
    def __init__(self):
        self.users = MemoryUsers()
        self.sessions = MemorySessions()
        self.hospitals = MemoryHospitals()
        self.leads = MemoryLeads()
        self.documents = MemoryDocuments()
        self.remarks = MemoryRemarks()
        self.partner_points = MemoryPartnerPoints()
        self.events = MemoryEvents()

    def _tables(self):
        return [
            self.users, self.sessions, self.hospitals, self.leads,
            self.documents, self.remarks, self.partner_points, self.events,
        ]

    @asynccontextmanager
    async def transaction(self):
        """Snapshot every table; restore all of them if the block raises"""
        snapshot = [copy.deepcopy(t.rows) for t in self._tables()]
        try:
            yield None
        except BaseException:
            for table, rows in zip(self._tables(), snapshot):
                table.rows = rows
            raise
