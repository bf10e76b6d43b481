"""Client for the Microsoft Graph education API."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode

import aiohttp

from .const import (
	ASSIGNMENT_FIELDS, ASSIGNMENT_STATUS, BATCH_SIZE, CLASS_FIELDS, DEFAULT_RETRY_AFTER,
	GRAPH_BASE_URL, HTTP_OK, PAGE_SIZE, THROTTLE_STATUSES,
)
from .exceptions import GraphAPIError, GraphConnectionError, MalformedAssignmentError
from .models import ClassContext, FetchSummary, RosterClass
from .text import normalize_assignment

_LOGGER = logging.getLogger(__name__)


class BatchState(Enum):
	"""States a batch passes through. A batch is resubmitted at most once."""
	ISSUED = "issued"
	THROTTLED = "throttled"
	RESUBMITTED = "resubmitted"
	DONE = "done"


@dataclass
class BatchOutcome:
	"""Final sub-responses of a batch along with the states it went through."""
	responses: Dict[str, Dict[str, Any]]
	states: List[BatchState] = field(default_factory=list)
	delay: float = 0

	@property
	def resubmitted(self) -> bool:
		return BatchState.RESUBMITTED in self.states


def chunk(items: Sequence[Any], size: int) -> List[Sequence[Any]]:
	"""Split items into consecutive slices of at most size items."""
	if size < 1:
		raise ValueError(f"Batch size must be at least 1, got {size}")
	return [items[i:i + size] for i in range(0, len(items), size)]


def parse_retry_after(headers: Optional[Mapping[str, Any]]) -> float:
	"""Read a Retry-After delay in seconds, falling back to the default."""
	for key, value in (headers or {}).items():
		if key.lower() != "retry-after":
			continue
		try:
			return max(float(value), 0)
		except (TypeError, ValueError):
			_LOGGER.debug(f"Unparseable Retry-After header: {value!r}")
			break
	return DEFAULT_RETRY_AFTER


def throttle_delay(responses: Dict[str, Dict[str, Any]]) -> Tuple[List[str], float]:
	"""Find throttled sub-responses and the longest delay they ask for."""
	throttled = [rid for rid, resp in responses.items() if resp.get("status") in THROTTLE_STATUSES]
	delay = max((parse_retry_after(responses[rid].get("headers")) for rid in throttled), default=0)
	return throttled, delay


def assignments_url(class_id: str, cutoff: date) -> str:
	"""Relative URL listing a class's assigned work due on or before cutoff."""
	params = {
		"$filter": f"status eq '{ASSIGNMENT_STATUS}' and dueDateTime le {cutoff.strftime('%Y-%m-%d')}T23:59:59Z",
		"$select": ",".join(ASSIGNMENT_FIELDS),
		"$orderby": "dueDateTime desc",
		"$top": str(PAGE_SIZE),
	}
	query = urlencode(params, safe="$',", quote_via=quote)
	return f"/education/classes/{quote(class_id, safe='')}/assignments?{query}"


class GraphClient:
	"""Client for listing classes and their assignments."""

	def __init__(self, access_token: str, session: Optional[aiohttp.ClientSession] = None, batch_size: int = BATCH_SIZE, base_url: str = GRAPH_BASE_URL):
		"""Initialise Graph client.

		Args:
			access_token: Bearer token for the Graph API
			session: Optional aiohttp session. If None, a new one will be created.
			batch_size: Number of classes per $batch request
			base_url: Graph API root
		"""
		self._access_token = access_token
		self._session = session
		self._own_session = session is None
		self.batch_size = batch_size
		self.base_url = base_url.rstrip("/")

	async def __aenter__(self):
		"""Async context manager entry."""
		if self._own_session:
			self._session = aiohttp.ClientSession()
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		"""Async context manager exit."""
		if self._own_session and self._session:
			await self._session.close()

	@property
	def headers(self) -> Dict[str, str]:
		return {
			"Authorization": f"Bearer {self._access_token}",
			"Accept": "application/json",
		}

	def _ensure_session(self) -> aiohttp.ClientSession:
		if self._session is None:
			raise GraphAPIError("Client not properly initialised")
		return self._session

	async def list_classes(self, school_id: str, class_filter: Optional[str] = None) -> List[RosterClass]:
		"""List the classes of a school, following every result page.

		Args:
			school_id: Graph id of the school
			class_filter: Optional OData filter expression

		Returns:
			List of RosterClass objects
		"""
		session = self._ensure_session()
		url: Optional[str] = f"{self.base_url}/education/schools/{quote(school_id, safe='')}/classes"
		params: Optional[Dict[str, str]] = {"$select": ",".join(CLASS_FIELDS), "$top": str(PAGE_SIZE)}
		if class_filter:
			params["$filter"] = class_filter

		classes: List[RosterClass] = []
		try:
			while url:
				async with session.get(url, headers=self.headers, params=params) as resp:
					if resp.status != HTTP_OK:
						raise GraphAPIError(f"Failed to list classes: HTTP {resp.status}")
					data = await resp.json()
				if not isinstance(data, dict):
					raise GraphAPIError("Unexpected class listing response")
				for item in data.get("value", []):
					if not item.get("id") or not item.get("externalName"):
						_LOGGER.debug(f"Skipping class without id or name: {item}")
						continue
					classes.append(RosterClass(id=item["id"], name=item["externalName"]))
				# nextLink already carries the query string
				url = data.get("@odata.nextLink")
				params = None
		except aiohttp.ClientError as e:
			raise GraphConnectionError(f"Connection error: {e}") from e
		except asyncio.TimeoutError as e:
			raise GraphConnectionError("Timed out listing classes") from e
		except json.JSONDecodeError as e:
			raise GraphAPIError(f"Failed to parse class listing: {e}") from e

		_LOGGER.debug(f"Listed {len(classes)} classes for school {school_id}")
		return classes

	async def _post_batch(self, requests: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
		"""Post one $batch request and return its sub-responses keyed by id.

		If the batch call itself is throttled, every sub-request is reported
		as throttled with the batch's Retry-After header.
		"""
		session = self._ensure_session()
		try:
			async with session.post(f"{self.base_url}/$batch", headers=self.headers, json={"requests": requests}) as resp:
				if resp.status in THROTTLE_STATUSES:
					headers = dict(resp.headers)
					return {r["id"]: {"id": r["id"], "status": resp.status, "headers": headers} for r in requests}
				if resp.status != HTTP_OK:
					raise GraphAPIError(f"Batch request failed: HTTP {resp.status}")
				data = await resp.json()
		except aiohttp.ClientError as e:
			raise GraphConnectionError(f"Connection error: {e}") from e
		except asyncio.TimeoutError as e:
			raise GraphConnectionError("Timed out posting batch") from e
		except json.JSONDecodeError as e:
			raise GraphAPIError(f"Failed to parse batch response: {e}") from e
		if not isinstance(data, dict):
			raise GraphAPIError("Unexpected batch response")

		responses: Dict[str, Dict[str, Any]] = {}
		for item in data.get("responses", []):
			if isinstance(item, dict) and "id" in item:
				responses[str(item["id"])] = item
		return responses

	async def run_batch(self, requests: List[Dict[str, Any]]) -> BatchOutcome:
		"""Issue a batch, resubmitting it once if any part was throttled."""
		outcome = BatchOutcome(responses=await self._post_batch(requests), states=[BatchState.ISSUED])

		throttled, delay = throttle_delay(outcome.responses)
		if throttled:
			outcome.states.append(BatchState.THROTTLED)
			outcome.delay = delay
			_LOGGER.warning(f"Throttled on {len(throttled)} requests, waiting {delay:g}s...")
			await asyncio.sleep(delay)
			_LOGGER.info("Resuming...")
			outcome.responses = await self._post_batch(requests)
			outcome.states.append(BatchState.RESUBMITTED)

		outcome.states.append(BatchState.DONE)
		return outcome

	async def fetch_assignments(self, classes: Sequence[ClassContext], cutoff: date) -> FetchSummary:
		"""Fetch assigned work for classes and append it to each class.

		Classes whose sub-request fails are left without assignments and
		listed in the returned summary.

		Args:
			classes: Classes to fetch for
			cutoff: Last due date to include

		Returns:
			FetchSummary describing batches and failures
		"""
		summary = FetchSummary()

		for batch in chunk(list(classes), self.batch_size):
			by_id: Dict[str, ClassContext] = {}
			requests: List[Dict[str, Any]] = []
			for index, cls in enumerate(batch, start=1):
				request_id = str(index)
				by_id[request_id] = cls
				requests.append({"id": request_id, "method": "GET", "url": assignments_url(cls.id, cutoff)})

			outcome = await self.run_batch(requests)
			summary.batches += 1
			if outcome.resubmitted:
				summary.resubmitted += 1

			for request_id, cls in by_id.items():
				response = outcome.responses.get(request_id)
				status = response.get("status") if response else None
				if status != HTTP_OK:
					_LOGGER.warning(f"No homework retrieved for {cls.name}: status {status}")
					summary.failed[cls.id] = status or 0
					continue
				self._populate(cls, response.get("body"))

		_LOGGER.debug(f"Fetched homework in {summary.batches} batches ({summary.resubmitted} resubmitted, {len(summary.failed)} failed)")
		return summary

	def _populate(self, cls: ClassContext, body: Any) -> None:
		"""Append the assignments in a sub-response body to a class."""
		values = body.get("value") if isinstance(body, dict) else None
		if not isinstance(values, list):
			_LOGGER.warning(f"Unexpected assignments payload for {cls.name}")
			return

		for data in values:
			try:
				assignment = normalize_assignment(data, cls.exclude_text)
			except MalformedAssignmentError as e:
				_LOGGER.debug(f"Skipping assignment for {cls.name}: {e}")
				continue
			if assignment is not None:
				cls.assignments.append(assignment)
