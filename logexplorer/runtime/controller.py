"""Routes decoded keys through the pane key table and carries out commands."""

from __future__ import annotations

from ..input.keys import CommandKind, KeyCommand, PaneKeyTable
from .actions import ActionRunner
from .fetch import LogFetcher
from .state import ExplorerState


class ExplorerController:
    def __init__(
        self,
        state: ExplorerState,
        fetcher: LogFetcher,
        actions: ActionRunner,
        keys: PaneKeyTable | None = None,
    ) -> None:
        self.state = state
        self.fetcher = fetcher
        self.actions = actions
        self.keys = keys if keys is not None else PaneKeyTable(state)

    async def handle_key(self, key: str) -> bool:
        """Apply one key; returns ``True`` when the explorer should quit."""
        command = self.keys.handle_key(key)
        if command is None:
            return False
        return await self.execute(command)

    async def execute(self, command: KeyCommand) -> bool:
        if command.kind is CommandKind.QUIT:
            return True
        if command.kind is CommandKind.FETCH:
            await self.fetcher.fetch_page(command.page)
        elif command.kind is CommandKind.RUN_ACTION:
            record = self.state.selected_log()
            if record is not None and command.action is not None:
                self.state.status = self.actions.run(command.action, record)
        elif command.kind is CommandKind.OPEN_PAGE:
            self.state.status = self.actions.open_page(self.state.logs)
        return False
