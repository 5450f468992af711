"""
script_generator.py

Converts a Postman collection (v2.x) into a JMeter JMX test plan.

Plan layout:
  Test Plan
    HTTP Request Defaults (global timeouts)
    Thread Group
      one HTTP Request per collection request (folders flattened, in order)
        HTTP Header Manager (request headers)

Postman {{variables}} are rewritten to JMeter ${variables}.
"""

import json
import logging
import os
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple
from urllib.parse import urlencode, urlparse

from fastmcp import Context  # ✅ FastMCP 2.x import

from utils.config import load_config
from utils.file_utils import save_jmx_file

import xml.etree.ElementTree as ET  # Needed for creating empty hashTree elements
from services.jmx.plan import create_test_plan, create_thread_group
from services.jmx.config_elements import create_header_manager, create_http_defaults
from services.jmx.samplers import append_sampler, create_http_sampler

logger = logging.getLogger(__name__)

# === Global configuration ===
CONFIG = load_config()
GENERATOR_CONFIG = CONFIG.get("script_generator", {})

POSTMAN_VAR_RE = re.compile(r"\{\{\s*([^}]+?)\s*\}\}")


# ============================================================
# Helper Functions
# ============================================================

def to_jmeter_vars(text: Optional[str]) -> str:
    """Rewrite Postman {{var}} references as JMeter ${var}."""
    if not text:
        return ""
    return POSTMAN_VAR_RE.sub(lambda m: "${" + m.group(1) + "}", str(text))


def iter_requests(items: List[Dict[str, Any]], prefix: str = "") -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield (name, request) for every request item, descending into folders in order."""
    for item in items or []:
        if not isinstance(item, dict):
            continue
        if isinstance(item.get("item"), list):
            folder = item.get("name") or ""
            yield from iter_requests(item["item"], f"{prefix}{folder} / " if folder else prefix)
        elif "request" in item:
            request = item["request"]
            if isinstance(request, str):
                request = {"method": "GET", "url": request}
            yield f"{prefix}{item.get('name') or ''}", request


def _enabled(entries: Any) -> List[Dict[str, Any]]:
    return [e for e in entries or [] if isinstance(e, dict) and not e.get("disabled")]


def parse_request_url(url: Any, default_protocol: str = "https") -> Dict[str, str]:
    """
    Split a Postman url (raw string or url object) into domain / protocol / path.
    The query string, if any, stays on the path.
    """
    if isinstance(url, str):
        raw = to_jmeter_vars(url)
        parsed = urlparse(raw if "://" in raw else f"{default_protocol}://{raw}")
        path = parsed.path or "/"
        if parsed.query:
            path = f"{path}?{parsed.query}"
        return {"domain": parsed.netloc, "protocol": parsed.scheme or default_protocol, "path": path}

    url = url or {}
    host = url.get("host", "")
    domain = ".".join(host) if isinstance(host, list) else str(host)
    if url.get("port"):
        domain = f"{domain}:{url['port']}"

    segments = url.get("path", [])
    if isinstance(segments, list):
        path = "/" + "/".join(str(s) for s in segments)
    else:
        path = "/" + str(segments).lstrip("/")

    query = [(q.get("key", ""), q.get("value") or "") for q in _enabled(url.get("query"))]
    if query:
        path = f"{path}?{urlencode(query, safe='${}')}"

    return {
        "domain": to_jmeter_vars(domain),
        "protocol": url.get("protocol") or default_protocol,
        "path": to_jmeter_vars(path),
    }


def parse_request_body(body: Any) -> Tuple[List[Tuple[str, str]], Optional[str]]:
    """Returns (form arguments, raw body); at most one of them is non-empty."""
    if not isinstance(body, dict):
        return [], None
    mode = body.get("mode")
    if mode == "raw":
        return [], to_jmeter_vars(body.get("raw")) or None
    if mode in ("urlencoded", "formdata"):
        pairs = [
            (to_jmeter_vars(p.get("key")), to_jmeter_vars(p.get("value")))
            for p in _enabled(body.get(mode))
            if p.get("type", "text") == "text"
        ]
        return pairs, None
    return [], None


def build_test_plan(collection: Dict[str, Any]) -> Tuple[ET.Element, int]:
    """Build the JMX tree for a collection. Returns (root element, sampler count)."""
    plan_name = GENERATOR_CONFIG.get("test_plan_name") or (collection.get("info") or {}).get("name") or "Test Plan"
    default_protocol = GENERATOR_CONFIG.get("default_protocol", "https")

    test_plan, test_plan_hash_tree = create_test_plan(plan_name)

    http_defaults_cfg = GENERATOR_CONFIG.get("http_defaults", {})
    test_plan_hash_tree.append(create_http_defaults(
        http_defaults_cfg.get("connect_timeout_ms", 10000),
        http_defaults_cfg.get("response_timeout_ms", 15000),
    ))
    test_plan_hash_tree.append(ET.Element("hashTree"))

    tg_config = GENERATOR_CONFIG.get("thread_group", {})
    thread_group, thread_group_hash_tree = create_thread_group(
        num_threads=tg_config.get("num_threads", 1),
        ramp_time=tg_config.get("ramp_time", 1),
        loops=tg_config.get("loops", 1),
    )
    test_plan_hash_tree.append(thread_group)
    test_plan_hash_tree.append(thread_group_hash_tree)

    count = 0
    for name, request in iter_requests(collection.get("item", [])):
        count += 1
        target = parse_request_url(request.get("url"), default_protocol)
        arguments, raw_body = parse_request_body(request.get("body"))
        sampler = create_http_sampler(
            name=name or f"Request {count}",
            method=request.get("method") or "GET",
            domain=target["domain"],
            protocol=target["protocol"],
            path=target["path"],
            arguments=arguments,
            raw_body=raw_body,
        )
        headers = [(h.get("key", ""), to_jmeter_vars(h.get("value"))) for h in _enabled(request.get("header"))]
        append_sampler(thread_group_hash_tree, sampler, create_header_manager(headers))

    return test_plan, count


def load_postman_collection(collection_path: str) -> Dict[str, Any]:
    """
    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the file is empty, not JSON, or has no item list.
    """
    if not collection_path or not os.path.isfile(collection_path):
        raise FileNotFoundError(f"Postman collection not found: {collection_path}")

    with open(collection_path, "r", encoding="utf-8") as f:
        raw = f.read().strip()
    if not raw:
        raise ValueError("Postman collection file is empty")

    try:
        collection = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e

    if not isinstance(collection, dict) or not isinstance(collection.get("item"), list):
        raise ValueError("Invalid Postman collection: no items found")
    return collection


# ============================================================
# Main JMeter JMX Generator function
# ============================================================

async def generate_jmx_from_postman(collection_path: str, ctx: Optional[Context] = None) -> Dict[str, Any]:
    """
    Generate a JMX script from a Postman collection file.

    Output: <jmx_dir>/generated_<collection stem>.jmx

    Returns:
      {
        "status": "OK" | "NOT_FOUND" | "ERROR",
        "jmx_path": "<full path to .jmx file (if OK)>",
        "sampler_count": int,
        "message": "<human readable status>",
      }
    """
    try:
        collection = load_postman_collection(collection_path)
    except FileNotFoundError as e:
        if ctx:
            await ctx.error(str(e))
        return {"status": "NOT_FOUND", "jmx_path": None, "sampler_count": 0, "message": str(e)}
    except ValueError as e:
        if ctx:
            await ctx.error(str(e))
        return {"status": "ERROR", "jmx_path": None, "sampler_count": 0, "message": str(e)}

    root, count = build_test_plan(collection)
    stem = os.path.splitext(os.path.basename(collection_path))[0]
    jmx_path = save_jmx_file(root, f"generated_{stem}.jmx")

    msg = f"JMX generated with {count} sampler(s)"
    logger.info("%s: %s", msg, jmx_path)
    if ctx:
        await ctx.info(f"✅ {msg}: {jmx_path}")

    return {"status": "OK", "jmx_path": jmx_path, "sampler_count": count, "message": msg}
