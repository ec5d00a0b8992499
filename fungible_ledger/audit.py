"""
Audit Trail Module

Hash-chained append-only log of ledger events with SHA-256 for tamper
detection. Each record commits to the previous one, so editing or removing a
stored event breaks the chain from that point on.
"""

import hashlib
import json
import threading
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any

from .events import LedgerEvent
from .storage import StorageInterface


@dataclass
class AuditRecord:
    """
    One chained audit entry wrapping a ledger event in dict form
    """
    id: str
    sequence: int
    recorded_at: str
    event: Dict[str, Any]
    previous_hash: str
    current_hash: str = ""

    def calculate_hash(self) -> str:
        """
        SHA-256 over every field except current_hash
        """
        hash_data = {
            'id': self.id,
            'sequence': self.sequence,
            'recorded_at': self.recorded_at,
            'event': self.event,
            'previous_hash': self.previous_hash,
        }
        json_data = json.dumps(hash_data, sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        """Verify that the current hash is correct"""
        return self.current_hash == self.calculate_hash()

    @property
    def token_id(self) -> int:
        return self.event['token_id']

    @property
    def kind(self) -> str:
        return self.event['kind']

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AuditRecord':
        return cls(**data)


class AuditTrail:
    """
    Hash-chained audit trail. Instances are callable so they can be used
    directly as a ledger event sink.
    """

    def __init__(self, storage: StorageInterface, table_name: str = "audit_events"):
        self.storage = storage
        self.table_name = table_name
        self._lock = threading.Lock()
        self._last_hash = ""
        self._next_sequence = 0
        self._load_chain_head()

    def _load_chain_head(self) -> None:
        """Load the hash and sequence of the most recent record"""
        records = self.storage.load_all(self.table_name)
        if records:
            last = max(records, key=lambda r: r['sequence'])
            self._last_hash = last['current_hash']
            self._next_sequence = last['sequence'] + 1

    def log_event(self, event: LedgerEvent) -> AuditRecord:
        """
        Append a ledger event to the chain

        Args:
            event: Event emitted by the ledger

        Returns:
            The stored AuditRecord
        """
        with self._lock:
            sequence = self._next_sequence
            record = AuditRecord(
                id=f"{sequence:012d}",
                sequence=sequence,
                recorded_at=datetime.now(timezone.utc).isoformat(),
                event=event.to_dict(),
                previous_hash=self._last_hash,
            )
            record.current_hash = record.calculate_hash()

            self.storage.save(self.table_name, record.id, record.to_dict())

            self._last_hash = record.current_hash
            self._next_sequence = sequence + 1
            return record

    __call__ = log_event

    def _records(self) -> List[AuditRecord]:
        records = [AuditRecord.from_dict(data) for data in self.storage.load_all(self.table_name)]
        records.sort(key=lambda r: r.sequence)
        return records

    def get_all_events(self, limit: Optional[int] = None) -> List[AuditRecord]:
        """
        Get audit records in chain order

        Args:
            limit: Only return the most recent N records
        """
        records = self._records()
        if limit:
            records = records[-limit:]
        return records

    def get_events_for_token(self, token_id: int, limit: Optional[int] = None) -> List[AuditRecord]:
        """Get audit records touching one token, in chain order"""
        records = [r for r in self._records() if r.token_id == token_id]
        if limit:
            records = records[-limit:]
        return records

    def get_events_by_kind(self, kind: str) -> List[AuditRecord]:
        """Get audit records for one event kind ("NewToken", "Transfer", "Approval")"""
        return [r for r in self._records() if r.kind == kind]

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the entire audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_events': 0,
            'hash_errors': [],
            'chain_breaks': [],
        }

        records = self._records()
        result['total_events'] = len(records)

        previous_hash = ""
        for position, record in enumerate(records):
            if not record.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'record_id': record.id,
                    'position': position,
                    'expected_hash': record.calculate_hash(),
                    'actual_hash': record.current_hash
                })
            if record.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'record_id': record.id,
                    'position': position,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': record.previous_hash
                })
            previous_hash = record.current_hash

        return result

    def count_events(self) -> int:
        """Get total number of audit records"""
        return self.storage.count(self.table_name)

    def get_latest_hash(self) -> Optional[str]:
        """Get the hash of the most recent audit record"""
        return self._last_hash or None
