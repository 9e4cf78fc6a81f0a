from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol

import streamlit as st

NoticeLevel = Literal["info", "success", "error"]


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    title: str
    description: str | None = None


class Notifier(Protocol):
    def info(self, title: str, description: str | None = None) -> None: ...

    def success(self, title: str, description: str | None = None) -> None: ...

    def error(self, title: str, description: str | None = None) -> None: ...


@dataclass
class RecordingNotifier:
    """Keeps every notice in memory instead of showing it."""

    notices: list[Notice] = field(default_factory=list)

    def info(self, title: str, description: str | None = None) -> None:
        self.notices.append(Notice("info", title, description))

    def success(self, title: str, description: str | None = None) -> None:
        self.notices.append(Notice("success", title, description))

    def error(self, title: str, description: str | None = None) -> None:
        self.notices.append(Notice("error", title, description))

    @property
    def titles(self) -> list[str]:
        return [notice.title for notice in self.notices]

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None


class StreamlitNotifier:
    """Toasts for info/success, an inline error box for failures."""

    def info(self, title: str, description: str | None = None) -> None:
        st.toast(self._join(title, description), icon="ℹ️")

    def success(self, title: str, description: str | None = None) -> None:
        st.toast(self._join(title, description), icon="✅")

    def error(self, title: str, description: str | None = None) -> None:
        st.error(self._join(title, description), icon="❌")

    @staticmethod
    def _join(title: str, description: str | None) -> str:
        return f"{title} {description}" if description else title
