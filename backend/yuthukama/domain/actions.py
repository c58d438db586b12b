"""
Edit/delete affordances for a single chat message.

These checks only decide what the user is offered. The server re-checks
ownership and deletion state on every edit and delete.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

EditCommand = Callable[[Any, str], Any]
DeleteCommand = Callable[[Any], Any]


def actions_available(message: Any, is_sent_by_current_user: bool) -> bool:
    return not message.deleted and bool(is_sent_by_current_user)


class MessageActionMenu:
    """
    Local state for the edit dialog and the delete confirmation.

    Deletion is two steps: request_delete() then confirm_delete().
    When actions are not available every command does nothing.
    """

    def __init__(
        self,
        message: Any,
        is_sent_by_current_user: bool,
        on_edit: EditCommand,
        on_delete: DeleteCommand,
    ):
        self.message = message
        self.is_sent_by_current_user = is_sent_by_current_user
        self._on_edit = on_edit
        self._on_delete = on_delete

        self.editing = False
        self.draft: str = message.text or ""
        self.delete_pending = False

    @property
    def visible(self) -> bool:
        return actions_available(self.message, self.is_sent_by_current_user)

    @property
    def can_submit(self) -> bool:
        return bool(self.draft.strip()) and self.draft != self.message.text

    def open_edit(self) -> None:
        if not self.visible:
            return
        self.draft = self.message.text or ""
        self.editing = True

    def set_draft(self, text: str) -> None:
        self.draft = text

    def submit_edit(self) -> bool:
        """Run the edit command if the draft is a real change. Always closes the editor."""
        called = False
        if self.visible and self.editing and self.can_submit:
            self._on_edit(self.message.id, self.draft.strip())
            called = True
        self.editing = False
        return called

    def cancel_edit(self) -> None:
        self.draft = self.message.text or ""
        self.editing = False

    def request_delete(self) -> bool:
        if not self.visible:
            return False
        self.delete_pending = True
        return True

    def confirm_delete(self) -> bool:
        if not (self.visible and self.delete_pending):
            return False
        self.delete_pending = False
        self._on_delete(self.message.id)
        return True

    def cancel_delete(self) -> None:
        self.delete_pending = False


def menu_for(
    message: Any,
    current_user_id: Optional[int],
    on_edit: EditCommand,
    on_delete: DeleteCommand,
) -> MessageActionMenu:
    return MessageActionMenu(
        message,
        current_user_id is not None and message.sender_id == current_user_id,
        on_edit,
        on_delete,
    )
