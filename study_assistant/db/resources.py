"""Database functions for uploaded study resources.

A resource row holds the file reference, the owner and the AI analysis
(subject, topics, summary, questions) written in a single insert.
Every read and delete is scoped to the owning user.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from supabase import Client

from study_assistant.models.analysis import AnalysisResult
from study_assistant.models.resources import Resource
from study_assistant.services.resource_search import sort_newest_first

TABLE = "resources"
REQUIRED_FILE_FIELDS = ['title', 'file_name', 'file_url', 'user_id']


def _validate_uuid(resource_id: str) -> None:
    try:
        UUID(resource_id)
    except ValueError:
        raise ValueError(f"Invalid UUID format: {resource_id}")


async def create_resource(
    client: Client,
    analysis: AnalysisResult,
    file_info: Dict[str, Any],
) -> Resource:
    """Insert a resource record with its analysis.

    Args:
        client: Supabase client instance
        analysis: Parsed (or default) analysis for the document
        file_info: Metadata dictionary with keys:
            - title (str): Display title
            - file_name (str): Original filename
            - file_url (str): gs:// URL of the stored PDF
            - user_id (str): Owner
            - storage_path (str, optional): Object path inside the bucket
            - user_name (str, optional): Owner display name
            - file_hash (str, optional): SHA-256 of the PDF
            - analysis_error (str, optional): Why the default analysis was used

    Returns:
        Resource: The stored record

    Raises:
        ValueError: If required file_info fields are missing
        RuntimeError: If the insert fails
    """
    missing = [f for f in REQUIRED_FILE_FIELDS if not file_info.get(f)]
    if missing:
        raise ValueError(f"Missing required file_info fields: {', '.join(missing)}")

    record = {
        'title': file_info['title'],
        'file_name': file_info['file_name'],
        'file_url': file_info['file_url'],
        'storage_path': file_info.get('storage_path'),
        'file_hash': file_info.get('file_hash'),
        'user_id': file_info['user_id'],
        'user_name': file_info.get('user_name'),
        **analysis.model_dump(mode='json'),
        'analysis_error': file_info.get('analysis_error'),
        'uploaded_at': datetime.now(timezone.utc).isoformat(),
    }

    try:
        response = await asyncio.to_thread(
            lambda: client.table(TABLE).insert(record).execute()
        )
    except Exception as e:
        raise RuntimeError(f"Failed to insert resource: {str(e)}") from e

    if not response.data:
        raise RuntimeError("Failed to insert resource: insert returned no data")
    return Resource.model_validate(response.data[0])


async def get_resource(client: Client, resource_id: str, user_id: str) -> Optional[Resource]:
    """Return the resource if it exists and belongs to ``user_id``.

    Raises:
        ValueError: If resource_id is not a valid UUID
        RuntimeError: If the query fails
    """
    _validate_uuid(resource_id)

    try:
        response = await asyncio.to_thread(
            lambda: client.table(TABLE)
            .select('*')
            .eq('id', resource_id)
            .eq('user_id', user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise RuntimeError(f"Failed to retrieve resource: {str(e)}") from e

    if not response.data:
        return None
    return Resource.model_validate(response.data[0])


async def list_resources(client: Client, user_id: str) -> List[Resource]:
    """All resources owned by ``user_id``, newest first.

    Ordering is done in Python so the table needs no extra index.

    Raises:
        RuntimeError: If the query fails
    """
    try:
        response = await asyncio.to_thread(
            lambda: client.table(TABLE).select('*').eq('user_id', user_id).execute()
        )
    except Exception as e:
        raise RuntimeError(f"Failed to list resources: {str(e)}") from e

    resources = [Resource.model_validate(row) for row in (response.data or [])]
    return sort_newest_first(resources)


async def delete_resource(client: Client, resource_id: str, user_id: str) -> bool:
    """Delete an owned resource record.

    Returns:
        True if a row was deleted, False if nothing matched

    Raises:
        ValueError: If resource_id is not a valid UUID
        RuntimeError: If the delete fails
    """
    _validate_uuid(resource_id)

    try:
        response = await asyncio.to_thread(
            lambda: client.table(TABLE)
            .delete()
            .eq('id', resource_id)
            .eq('user_id', user_id)
            .execute()
        )
    except Exception as e:
        raise RuntimeError(f"Failed to delete resource: {str(e)}") from e

    return bool(response.data)
