"""
Database Handler Module.

SQLite persistence for pack slip records: the create/get/update store the
pipeline writes extraction results, vendor detections and line items to.

Features:
    - Automatic schema creation
    - One connection shared across threads, guarded by a lock
    - List-valued fields stored as JSON
"""

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from packslip.utils.logger import get_logger
from packslip.utils.helpers import ensure_directory
from packslip.utils.exceptions import DatabaseError, RecordNotFoundError
from packslip.pipeline.record import PackSlipRecord, PackSlipStatus

# Initialize module logger
logger = get_logger(__name__)

IN_MEMORY = ":memory:"

# Fields update() may change
UPDATABLE_FIELDS = {
    'status', 'file_name', 'mime_type', 'file_size', 'extraction', 'vendor',
    'line_items', 'metadata', 'errors', 'submitted_at'
}


class PackSlipStore:
    """
    Stores PackSlipRecords in SQLite.
    
    Attributes:
        db_path: Path to the SQLite database file (or ":memory:")
        table_name: Name of the records table
        
    Example:
        >>> store = PackSlipStore(":memory:")
        >>> record = store.create(PackSlipRecord(file_name="slip.pdf"))
        >>> store.update(record.id, status=PackSlipStatus.REVIEW).status
        <PackSlipStatus.REVIEW: 'review'>
    """
    
    table_name = "pack_slips"
    
    def __init__(self, db_path: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the store.
        
        Args:
            db_path: Path to database file. If None, uses configuration.
        """
        if db_path:
            self.db_path = db_path if str(db_path) == IN_MEMORY else Path(db_path)
        elif get_config("storage.database_path"):
            self.db_path = Path(get_config("storage.database_path"))
        else:
            output_dir = Path(get_config("paths.output_dir", "outputs"))
            self.db_path = output_dir / get_config("storage.database_name", "packslips.db")
        
        if isinstance(self.db_path, Path):
            ensure_directory(self.db_path.parent)
        
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        except sqlite3.Error as e:
            raise DatabaseError("connect", str(e))
        
        self._create_tables()
        logger.info(f"PackSlipStore initialized (db: {self.db_path})")
    
    def _create_tables(self) -> None:
        create_sql = f"""
        CREATE TABLE IF NOT EXISTS {self.table_name} (
            id TEXT PRIMARY KEY,
            status TEXT NOT NULL,
            file_name TEXT,
            mime_type TEXT,
            file_size INTEGER,
            vendor_id TEXT,
            extraction TEXT,
            vendor TEXT,
            line_items TEXT,
            metadata TEXT,
            errors TEXT,
            created_at TEXT,
            updated_at TEXT,
            submitted_at TEXT
        )
        """
        with self._lock:
            try:
                self._conn.execute(create_sql)
                self._conn.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_{self.table_name}_status
                    ON {self.table_name} (status)
                """)
                self._conn.commit()
            except sqlite3.Error as e:
                raise DatabaseError("create tables", str(e))
        
        logger.debug("Database tables created/verified")
    
    @staticmethod
    def _to_row(record: PackSlipRecord) -> Dict[str, Any]:
        data = record.to_dict()
        return {
            'id': data['id'],
            'status': data['status'],
            'file_name': data['file_name'],
            'mime_type': data['mime_type'],
            'file_size': data['file_size'],
            'vendor_id': data['vendor']['vendor_id'],
            'extraction': json.dumps(data['extraction']),
            'vendor': json.dumps(data['vendor']),
            'line_items': json.dumps(data['line_items']),
            'metadata': json.dumps(data['metadata']),
            'errors': json.dumps(data['errors']),
            'created_at': data['created_at'],
            'updated_at': data['updated_at'],
            'submitted_at': data['submitted_at']
        }
    
    @staticmethod
    def _from_row(row: sqlite3.Row) -> PackSlipRecord:
        return PackSlipRecord.from_dict({
            'id': row['id'],
            'status': row['status'],
            'file_name': row['file_name'],
            'mime_type': row['mime_type'],
            'file_size': row['file_size'],
            'extraction': json.loads(row['extraction'] or 'null'),
            'vendor': json.loads(row['vendor'] or 'null'),
            'line_items': json.loads(row['line_items'] or '[]'),
            'metadata': json.loads(row['metadata'] or '{}'),
            'errors': json.loads(row['errors'] or '[]'),
            'created_at': row['created_at'],
            'updated_at': row['updated_at'],
            'submitted_at': row['submitted_at']
        })
    
    def create(self, record: PackSlipRecord) -> PackSlipRecord:
        """
        Insert a new record.
        
        Raises:
            DatabaseError: If the id already exists or the insert fails.
        """
        row = self._to_row(record)
        columns = ", ".join(row)
        placeholders = ", ".join(f":{name}" for name in row)
        
        with self._lock:
            try:
                self._conn.execute(
                    f"INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders})",
                    row
                )
                self._conn.commit()
            except sqlite3.IntegrityError:
                raise DatabaseError("create", f"Record already exists: {record.id}")
            except sqlite3.Error as e:
                raise DatabaseError("create", str(e))
        
        logger.debug(f"Created record {record.id} ({record.file_name})")
        return record
    
    def get(self, record_id: str) -> PackSlipRecord:
        """
        Fetch a record by id.
        
        Raises:
            RecordNotFoundError: If no record has this id.
            DatabaseError: If the query fails.
        """
        with self._lock:
            try:
                row = self._conn.execute(
                    f"SELECT * FROM {self.table_name} WHERE id = ?", (record_id,)
                ).fetchone()
            except sqlite3.Error as e:
                raise DatabaseError("get", str(e))
        
        if row is None:
            raise RecordNotFoundError(record_id)
        return self._from_row(row)
    
    def save(self, record: PackSlipRecord) -> PackSlipRecord:
        """
        Write every field of an existing record.
        
        Raises:
            RecordNotFoundError: If the record was never created.
            DatabaseError: If the update fails.
        """
        record.touch()
        row = self._to_row(record)
        assignments = ", ".join(f"{name} = :{name}" for name in row if name != 'id')
        
        with self._lock:
            try:
                cursor = self._conn.execute(
                    f"UPDATE {self.table_name} SET {assignments} WHERE id = :id", row
                )
                self._conn.commit()
            except sqlite3.Error as e:
                raise DatabaseError("update", str(e))
        
        if cursor.rowcount == 0:
            raise RecordNotFoundError(record.id)
        return record
    
    def update(self, record_id: str, **fields: Any) -> PackSlipRecord:
        """
        Update some fields of a record.
        
        Args:
            record_id: Record id.
            **fields: PackSlipRecord attributes to replace.
            
        Returns:
            The updated record.
            
        Raises:
            ValueError: If a field cannot be updated.
            RecordNotFoundError: If no record has this id.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")
        
        record = self.get(record_id)
        for name, value in fields.items():
            setattr(record, name, value)
        record.status = PackSlipStatus(record.status)
        
        return self.save(record)
    
    def list(self, status: Optional[PackSlipStatus] = None, limit: Optional[int] = None) -> List[PackSlipRecord]:
        """
        List records, newest first.
        
        Args:
            status: Only records in this state.
            limit: Maximum number of records.
        """
        query = f"SELECT * FROM {self.table_name}"
        params: List[Any] = []
        
        if status is not None:
            query += " WHERE status = ?"
            params.append(PackSlipStatus(status).value)
        query += " ORDER BY created_at DESC, rowid DESC"
        if limit:
            query += " LIMIT ?"
            params.append(int(limit))
        
        with self._lock:
            try:
                rows = self._conn.execute(query, params).fetchall()
            except sqlite3.Error as e:
                raise DatabaseError("list", str(e))
        
        return [self._from_row(row) for row in rows]
    
    def count(self, status: Optional[PackSlipStatus] = None) -> int:
        """Count records, optionally by state."""
        query = f"SELECT COUNT(*) FROM {self.table_name}"
        params: List[Any] = []
        if status is not None:
            query += " WHERE status = ?"
            params.append(PackSlipStatus(status).value)
        
        with self._lock:
            try:
                return self._conn.execute(query, params).fetchone()[0]
            except sqlite3.Error as e:
                raise DatabaseError("count", str(e))
    
    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()
        logger.debug(f"Closed database {self.db_path}")
    
    def __enter__(self) -> "PackSlipStore":
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
