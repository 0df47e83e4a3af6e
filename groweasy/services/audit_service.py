from typing import Optional, Dict, Any, List, Tuple
import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from groweasy.models.audit_log import AuditLog


class AuditService:
    """
    Audit service for logging admin actions on sellers, payouts, coupons, etc.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: str,
        target: str,
        target_id: Optional[uuid.UUID | str] = None,
        admin_id: Optional[uuid.UUID] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuditLog:
        """
        Create an audit log entry.

        Args:
            action: The action performed (APPROVE_SELLER, PROCESS_PAYOUT, ...)
            target: Type of record (user, payout, coupon, ...)
            target_id: ID of the affected record
            admin_id: ID of the admin performing the action
            details: Free-form context (reason, old/new values)
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            The created AuditLog entry
        """
        audit_log = AuditLog(
            action=action,
            target=target,
            target_id=str(target_id) if target_id is not None else None,
            admin_id=admin_id,
            details=details,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self.db.add(audit_log)
        await self.db.flush()
        return audit_log

    async def list_logs(
        self,
        action: Optional[str] = None,
        target: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[AuditLog], int]:
        query = select(AuditLog)
        if action:
            query = query.where(AuditLog.action == action)
        if target:
            query = query.where(AuditLog.target == target)

        total = (await self.db.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar() or 0

        result = await self.db.execute(
            query.order_by(AuditLog.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total
