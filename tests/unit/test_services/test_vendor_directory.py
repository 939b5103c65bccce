"""Tests for the Supabase vendor directory reader."""

import pytest
from unittest.mock import patch
from src.services.vendor_directory import VendorDirectory
from src.utils.config import EngineConfig
from tests.utils.factories import create_vendor_data
from tests.utils.helpers import mock_query_chain, mock_supabase_context

CONFIG = EngineConfig(lookup_retry_backoff_seconds=0)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_candidates_queries_eligible_specialists():
    rows = [create_vendor_data(vendor_id="v1", average_rating=4.8)]
    query = mock_query_chain(data=rows)

    with patch('src.services.vendor_directory.SupabaseClient') as mock_client_class:
        client = mock_supabase_context(mock_client_class, query)

        vendors = await VendorDirectory(CONFIG).list_candidates("hvac", 5)

    assert [v.id for v in vendors] == ["v1"]
    client.table.assert_called_once_with("vendors")
    query.in_.assert_called_once_with("status", ["active", "preferred"])
    query.contains.assert_called_once_with("specialty", ["hvac"])
    query.limit.assert_called_once_with(5)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_candidates_tie_break_is_deterministic():
    """Test equal ratings are ordered by vendor id, unrated vendors last."""
    rows = [
        create_vendor_data(vendor_id="v-c", average_rating=4.5),
        create_vendor_data(vendor_id="v-none", average_rating=None),
        create_vendor_data(vendor_id="v-a", average_rating=4.5),
        create_vendor_data(vendor_id="v-top", average_rating=5.0),
    ]
    query = mock_query_chain(data=rows)

    with patch('src.services.vendor_directory.SupabaseClient') as mock_client_class:
        mock_supabase_context(mock_client_class, query)

        vendors = await VendorDirectory(CONFIG).list_candidates("hvac", 5)

    assert [v.id for v in vendors] == ["v-top", "v-a", "v-c", "v-none"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_eligible_vendor_found():
    query = mock_query_chain(data=[create_vendor_data(vendor_id="v1", status="preferred")])

    with patch('src.services.vendor_directory.SupabaseClient') as mock_client_class:
        mock_supabase_context(mock_client_class, query)

        vendor = await VendorDirectory(CONFIG).get_eligible_vendor("v1")

    assert vendor.id == "v1"
    query.eq.assert_called_once_with("id", "v1")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_eligible_vendor_missing():
    query = mock_query_chain(data=[])

    with patch('src.services.vendor_directory.SupabaseClient') as mock_client_class:
        mock_supabase_context(mock_client_class, query)

        assert await VendorDirectory(CONFIG).get_eligible_vendor("v-gone") is None
