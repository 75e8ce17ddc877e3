# runes/knowledge_base.py
# ------------------------------------------------------------
# Rule storage keyed by unique name.
# Rules live in slots; removal leaves a tombstone that the next
# add reuses, so surviving slot indices never move.
# ------------------------------------------------------------

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .errors import DuplicateRuleError
from .rule import Rule


@dataclass(frozen=True)
class _Slot:
    seq: int  # insertion order, monotonic across reuse
    rule: Rule


class KnowledgeBase:
    def __init__(self) -> None:
        self._slots: List[Optional[_Slot]] = []
        self._free: List[int] = []
        self._index: Dict[str, int] = {}
        self._next_seq = 0
        self._by_salience: Optional[List[int]] = None

    def add(self, rule: Rule) -> None:
        if rule.name in self._index:
            raise DuplicateRuleError(rule.name)

        slot = _Slot(self._next_seq, rule)
        self._next_seq += 1
        if self._free:
            pos = self._free.pop()
            self._slots[pos] = slot
        else:
            pos = len(self._slots)
            self._slots.append(slot)
        self._index[rule.name] = pos
        self._by_salience = None

    def get(self, name: str) -> Optional[Rule]:
        pos = self._index.get(name)
        if pos is None:
            return None
        return self._slots[pos].rule

    def remove(self, name: str) -> Optional[Rule]:
        pos = self._index.pop(name, None)
        if pos is None:
            return None
        rule = self._slots[pos].rule
        self._slots[pos] = None
        self._free.append(pos)
        self._by_salience = None
        return rule

    def clear(self) -> None:
        self._slots.clear()
        self._free.clear()
        self._index.clear()
        self._by_salience = None

    def _live(self) -> List[_Slot]:
        return sorted((s for s in self._slots if s is not None), key=lambda s: s.seq)

    def list_rules(self) -> List[Rule]:
        """Rules in insertion order."""
        return [s.rule for s in self._live()]

    def names(self) -> List[str]:
        return [s.rule.name for s in self._live()]

    def sorted_by_salience(self) -> List[Rule]:
        """Highest salience first; equal salience keeps insertion order."""
        if self._by_salience is None:
            live = [pos for pos, s in enumerate(self._slots) if s is not None]
            live.sort(key=lambda pos: (-self._slots[pos].rule.salience, self._slots[pos].seq))
            self._by_salience = live
        return [self._slots[pos].rule for pos in self._by_salience]

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.list_rules())
