"""
Campaign Review Service

Operations console core for the creator/brand campaign marketplace:
- Campaign lifecycle review (submit, approve, reject, pause, resume, complete)
- Brand edit requests on live campaigns with reviewer approval
- Resilient console reads with stale and placeholder fallbacks
- Lifecycle notifications over NATS

Port: 8251
"""

__version__ = "1.0.0"
__service__ = "campaign_review_service"
