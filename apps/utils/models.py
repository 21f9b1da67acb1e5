# utils/models.py

from django.db import models
import uuid
import logging

logger = logging.getLogger(__name__)


def get_actor_id(actor):
    """
    Normalise an actor (user instance, id or None) into the string id
    stored on audit fields.
    """
    if actor is None:
        return None
    if hasattr(actor, 'pk'):
        return str(actor.pk)
    if hasattr(actor, 'id'):
        return str(actor.id)
    return str(actor)


# =============================================================================
# BASE MODEL - SOCIETY DATA
# =============================================================================

class BaseModel(models.Model):
    """
    Base model for all society records.

    Features:
    - UUID primary key
    - Created/updated timestamps
    - Actor tracking (who created/updated) stored as plain ids so that
      records never hold a database-level link to the auth tables
    """

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Timestamp fields
    created_at = models.DateTimeField("Created At", auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField("Updated At", auto_now=True, db_index=True)

    # User tracking - CharField to avoid FK constraints to auth tables
    created_by_id = models.CharField(
        "Created By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who created this record"
    )
    updated_by_id = models.CharField(
        "Updated By ID",
        max_length=50,
        null=True,
        blank=True,
        db_index=True,
        help_text="ID of user who last updated this record"
    )

    class Meta:
        abstract = True

    def set_actor(self, actor):
        """
        Stamp the audit fields with the acting user.

        Usage:
            account.set_actor(request.user)
            account.save()
        """
        actor_id = get_actor_id(actor)
        if actor_id is None:
            return
        if self._state.adding and not self.created_by_id:
            self.created_by_id = actor_id
        self.updated_by_id = actor_id
