"""アクションチャネル.

ディスパッチされた全アクションを各ウォッチャーのバッファへブロードキャストする。

各ウォッチャーは専用の無制限バッファを持つため、
ウォッチャーが待機中（ID採番中など）に届いたアクションも失われない。
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Union

from organizer.state.actions import Action, ActionType


Pattern = Union[ActionType, str, Iterable[Union[ActionType, str]], Callable[[Action], bool], None]


def matcher(pattern: Pattern) -> Callable[[Action], bool]:
    """パターンからアクション判定関数を作成.

    Args:
        pattern: None / "*"（全て）、種別、種別の集合、または述語関数

    Returns:
        判定関数
    """
    if pattern is None or pattern == "*":
        return lambda action: True

    if isinstance(pattern, str):
        name = pattern.value if isinstance(pattern, ActionType) else pattern
        return lambda action: action.type_name == name

    if callable(pattern):
        return pattern

    names = frozenset(p.value if isinstance(p, ActionType) else str(p) for p in pattern)
    return lambda action: action.type_name in names


class ActionBuffer:
    """ウォッチャー1つ分のアクションバッファ.

    take() で取り出したアクションは、次の take() 呼び出し時に処理済みとなる。
    そのため join() はウォッチャーが次の待機に戻った時点で完了する。
    """

    def __init__(self, name: str) -> None:
        """初期化.

        Args:
            name: ウォッチャー名
        """
        self.name = name
        self._queue: asyncio.Queue[Action] = asyncio.Queue()
        self._pending = False
        self._closed = False

    @property
    def idle(self) -> bool:
        """未処理のアクションがないか."""
        return self._closed or (self._queue.empty() and not self._pending)

    def put(self, action: Action) -> None:
        """アクションを追加."""
        if not self._closed:
            self._queue.put_nowait(action)

    async def take(self) -> Action:
        """次のアクションを待機して取り出す."""
        self._release()
        action = await self._queue.get()
        self._pending = True
        return action

    def _release(self) -> None:
        if self._pending:
            self._pending = False
            self._queue.task_done()

    async def join(self) -> None:
        """取り出し済みアクションの処理完了を待つ."""
        if self._closed:
            return
        await self._queue.join()

    def close(self) -> None:
        """バッファを閉じ、残りのアクションを破棄."""
        self._closed = True
        self._release()
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()


class ActionChannel:
    """アクションのブロードキャストチャネル."""

    def __init__(self) -> None:
        """初期化."""
        self._buffers: list[ActionBuffer] = []

    def open(self, name: str) -> ActionBuffer:
        """ウォッチャー用バッファを登録.

        Args:
            name: ウォッチャー名

        Returns:
            ActionBuffer
        """
        buffer = ActionBuffer(name)
        self._buffers.append(buffer)
        return buffer

    def remove(self, buffer: ActionBuffer) -> None:
        """バッファを登録解除."""
        buffer.close()
        if buffer in self._buffers:
            self._buffers.remove(buffer)

    def put(self, action: Action) -> None:
        """全バッファへアクションを配信."""
        for buffer in list(self._buffers):
            buffer.put(action)

    async def settle(self) -> None:
        """全ウォッチャーが待機状態に戻るまで待つ.

        ウォッチャーが再ディスパッチしたアクションも含めて処理し終えるまで繰り返す。
        """
        while True:
            for buffer in list(self._buffers):
                await buffer.join()
            if all(buffer.idle for buffer in self._buffers):
                return


__all__ = [
    "ActionBuffer",
    "ActionChannel",
    "Pattern",
    "matcher",
]
