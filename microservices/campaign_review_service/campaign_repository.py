"""
Campaign Review Data Repository

Data access layer - PostgreSQL (Async)

Tables (schema ``campaign_review`` by default):
    campaigns           one row per campaign; jsonb for per-type values
    campaign_creators   creator join records
    campaign_edits      brand edit requests for live campaigns

Rows are returned as plain dicts. Errors are logged and re-raised untouched;
classification happens in the gateway.
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.config import InfraConfig
from core.postgres_client import PostgresClientWrapper

logger = logging.getLogger(__name__)


class ExtendedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal, date and enum types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def json_dumps(obj):
    """JSON dumps with Decimal and datetime support"""
    return json.dumps(obj, cls=ExtendedJSONEncoder)


# Columns stored as jsonb
JSON_COLUMNS = frozenset({
    "brief",
    "platforms",
    "content_guidelines",
    "hashtags",
    "payout_rate",
    "budget_allocation",
    "rejection_feedback",
    "metrics",
    "requirements",
    "old_data",
    "new_data",
    "key_changes",
})


def _to_param(key: str, value: Any) -> Any:
    if key in JSON_COLUMNS:
        return json_dumps(value) if value is not None else None
    if isinstance(value, Enum):
        return value.value
    return value


def _set_clause(fields: Dict[str, Any], start: int = 1) -> Tuple[List[str], List[Any]]:
    clauses = []
    params = []
    for offset, (key, value) in enumerate(fields.items()):
        cast = "::jsonb" if key in JSON_COLUMNS else ""
        clauses.append(f"{key} = ${start + offset}{cast}")
        params.append(_to_param(key, value))
    return clauses, params


class CampaignRepository:
    """Campaign review data repository - PostgreSQL (Async)"""

    def __init__(self, config: Optional[InfraConfig] = None, db: Optional[PostgresClientWrapper] = None):
        self.db = db or PostgresClientWrapper("campaign_review_service", config)
        self.schema = self.db.config.postgres_schema

        # Table names
        self.campaigns_table = "campaigns"
        self.creators_table = "campaign_creators"
        self.edits_table = "campaign_edits"

    async def initialize(self):
        """Initialize database connection"""
        async with self.db:
            logger.info("Campaign review repository initialized with PostgreSQL")

    async def close(self):
        """Close database connection"""
        await self.db.close()
        logger.info("Campaign review repository database connection closed")

    async def health_check(self) -> bool:
        """Check repository health"""
        return await self.db.health_check()

    # ====================
    # Campaign Reads
    # ====================

    async def list_campaigns(
        self,
        statuses: Sequence[str],
        search: Optional[str] = None,
        limit: int = 25,
        offset: int = 0,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """List campaigns whose stored status is one of ``statuses``"""
        try:
            conditions = ["status = ANY($1::text[])"]
            params: List[Any] = [list(statuses)]

            if search:
                params.append(f"%{search}%")
                conditions.append(f"title ILIKE ${len(params)}")

            where_clause = " AND ".join(conditions)

            count_query = f'''
                SELECT COUNT(*) AS total
                FROM {self.schema}.{self.campaigns_table}
                WHERE {where_clause}
            '''

            list_query = f'''
                SELECT *
                FROM {self.schema}.{self.campaigns_table}
                WHERE {where_clause}
                ORDER BY created_at DESC, campaign_id
                LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}
            '''

            async with self.db:
                count_row = await self.db.query_row(count_query, params)
                rows = await self.db.query(list_query, params + [limit, offset])

            total = count_row["total"] if count_row else 0
            return rows, total

        except Exception as e:
            logger.error(f"Error listing campaigns for statuses {list(statuses)}: {e}")
            raise

    async def get_campaign(self, campaign_id: str) -> Optional[Dict[str, Any]]:
        """Get campaign by ID"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.campaigns_table}
                WHERE campaign_id = $1
            '''
            async with self.db:
                return await self.db.query_row(query, [campaign_id])

        except Exception as e:
            logger.error(f"Error getting campaign {campaign_id}: {e}")
            raise

    async def list_campaign_creators(self, campaign_id: str) -> List[Dict[str, Any]]:
        """Get creator join records for a campaign"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.creators_table}
                WHERE campaign_id = $1
                ORDER BY joined_at NULLS LAST, creator_id
            '''
            async with self.db:
                return await self.db.query(query, [campaign_id])

        except Exception as e:
            logger.error(f"Error getting creators for campaign {campaign_id}: {e}")
            raise

    async def count_active_creators(self, campaign_ids: Sequence[str]) -> Dict[str, int]:
        """Count active join records per campaign"""
        if not campaign_ids:
            return {}
        try:
            query = f'''
                SELECT campaign_id, COUNT(*) AS joined
                FROM {self.schema}.{self.creators_table}
                WHERE campaign_id = ANY($1::text[])
                  AND lower(status) IN ('active', 'approved')
                GROUP BY campaign_id
            '''
            async with self.db:
                rows = await self.db.query(query, [list(campaign_ids)])

            return {row["campaign_id"]: row["joined"] for row in rows}

        except Exception as e:
            logger.error(f"Error counting creators for {len(campaign_ids)} campaigns: {e}")
            raise

    # ====================
    # Campaign Writes
    # ====================

    async def update_campaign(
        self, campaign_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Update campaign fields in a single statement"""
        try:
            fields = {**fields, "updated_at": datetime.now(timezone.utc)}
            set_clauses, params = _set_clause(fields)
            params.append(campaign_id)

            query = f'''
                UPDATE {self.schema}.{self.campaigns_table}
                SET {", ".join(set_clauses)}
                WHERE campaign_id = ${len(params)}
                RETURNING *
            '''

            async with self.db:
                return await self.db.query_row(query, params)

        except Exception as e:
            logger.error(f"Error updating campaign {campaign_id}: {e}")
            raise

    # ====================
    # Edit Requests
    # ====================

    async def create_edit_request(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert an edit request"""
        try:
            columns = list(row.keys())
            placeholders = [
                f"${i}::jsonb" if column in JSON_COLUMNS else f"${i}"
                for i, column in enumerate(columns, start=1)
            ]
            params = [_to_param(column, row[column]) for column in columns]

            query = f'''
                INSERT INTO {self.schema}.{self.edits_table} ({", ".join(columns)})
                VALUES ({", ".join(placeholders)})
                RETURNING *
            '''

            async with self.db:
                return await self.db.query_row(query, params)

        except Exception as e:
            logger.error(f"Error creating edit request for campaign {row.get('campaign_id')}: {e}")
            raise

    async def get_edit_request(self, edit_id: str) -> Optional[Dict[str, Any]]:
        """Get edit request by ID"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.edits_table}
                WHERE edit_id = $1
            '''
            async with self.db:
                return await self.db.query_row(query, [edit_id])

        except Exception as e:
            logger.error(f"Error getting edit request {edit_id}: {e}")
            raise

    async def get_pending_edit_for_campaign(self, campaign_id: str) -> Optional[Dict[str, Any]]:
        """Get the pending edit request for a campaign"""
        try:
            query = f'''
                SELECT * FROM {self.schema}.{self.edits_table}
                WHERE campaign_id = $1 AND status = 'pending'
                ORDER BY requested_at DESC
                LIMIT 1
            '''
            async with self.db:
                return await self.db.query_row(query, [campaign_id])

        except Exception as e:
            logger.error(f"Error getting pending edit for campaign {campaign_id}: {e}")
            raise

    async def list_edit_requests(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        """List edit requests, oldest first"""
        try:
            if status:
                query = f'''
                    SELECT * FROM {self.schema}.{self.edits_table}
                    WHERE status = $1
                    ORDER BY requested_at ASC
                '''
                params = [status]
            else:
                query = f'''
                    SELECT * FROM {self.schema}.{self.edits_table}
                    ORDER BY requested_at ASC
                '''
                params = []

            async with self.db:
                return await self.db.query(query, params)

        except Exception as e:
            logger.error(f"Error listing edit requests: {e}")
            raise

    async def update_edit_request(
        self, edit_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Resolve a pending edit request; None when it is no longer pending"""
        try:
            set_clauses, params = _set_clause(fields)
            params.append(edit_id)

            query = f'''
                UPDATE {self.schema}.{self.edits_table}
                SET {", ".join(set_clauses)}
                WHERE edit_id = ${len(params)} AND status = 'pending'
                RETURNING *
            '''

            async with self.db:
                return await self.db.query_row(query, params)

        except Exception as e:
            logger.error(f"Error updating edit request {edit_id}: {e}")
            raise

    async def apply_edit_request(
        self,
        edit_id: str,
        campaign_id: str,
        campaign_fields: Dict[str, Any],
        edit_fields: Dict[str, Any],
    ) -> Optional[Tuple[Dict[str, Any], Dict[str, Any]]]:
        """Apply an approved edit to its campaign and resolve it in one transaction"""
        try:
            campaign_fields = {**campaign_fields, "updated_at": datetime.now(timezone.utc)}
            campaign_clauses, campaign_params = _set_clause(campaign_fields)
            campaign_params.append(campaign_id)
            campaign_query = f'''
                UPDATE {self.schema}.{self.campaigns_table}
                SET {", ".join(campaign_clauses)}
                WHERE campaign_id = ${len(campaign_params)}
                RETURNING *
            '''

            edit_clauses, edit_params = _set_clause(edit_fields)
            edit_params.append(edit_id)
            edit_query = f'''
                UPDATE {self.schema}.{self.edits_table}
                SET {", ".join(edit_clauses)}
                WHERE edit_id = ${len(edit_params)} AND status = 'pending'
                RETURNING *
            '''

            async with self.db:
                async with self.db.transaction() as conn:
                    edit_row = await conn.fetchrow(edit_query, *edit_params)
                    if edit_row is None:
                        return None
                    campaign_row = await conn.fetchrow(campaign_query, *campaign_params)
                    if campaign_row is None:
                        # Roll the edit resolution back with the transaction
                        raise LookupError(f"Campaign not found: {campaign_id}")

            return dict(campaign_row), dict(edit_row)

        except Exception as e:
            logger.error(f"Error applying edit request {edit_id} to campaign {campaign_id}: {e}")
            raise
