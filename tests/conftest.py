"""Shared fixtures and JMX builders for the JMeter MCP test suite."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple
from unittest.mock import AsyncMock, MagicMock
from xml.sax.saxutils import escape, quoteattr

import pytest

import utils.file_utils as file_utils


# ---------------------------------------------------------------------------
# JMX text builders
# ---------------------------------------------------------------------------

def sampler_xml(
    name: Optional[str] = "Request",
    path: Optional[str] = "/",
    method: Optional[str] = "GET",
    args: Iterable[Tuple[Optional[str], str]] = (),
    headers: Iterable[Tuple[str, str]] = (),
) -> str:
    """One HTTPSamplerProxy followed by its hashTree (with an optional Header Manager)."""
    name_attr = f" testname={quoteattr(name)}" if name is not None else ""
    props = []
    if path is not None:
        props.append(f'<stringProp name="HTTPSampler.path">{escape(path)}</stringProp>')
    if method is not None:
        props.append(f'<stringProp name="HTTPSampler.method">{escape(method)}</stringProp>')

    arg_items = []
    for arg_name, arg_value in args:
        name_prop = (
            f'<stringProp name="Argument.name">{escape(arg_name)}</stringProp>'
            if arg_name is not None else ""
        )
        arg_items.append(
            '<elementProp name="" elementType="HTTPArgument">'
            f'{name_prop}<stringProp name="Argument.value">{escape(arg_value)}</stringProp>'
            '</elementProp>'
        )
    arguments = (
        '<elementProp name="HTTPsampler.Arguments" elementType="Arguments">'
        f'<collectionProp name="Arguments.arguments">{"".join(arg_items)}</collectionProp>'
        '</elementProp>'
    )

    header_items = "".join(
        '<elementProp name="" elementType="Header">'
        f'<stringProp name="Header.name">{escape(h_name)}</stringProp>'
        f'<stringProp name="Header.value">{escape(h_value)}</stringProp>'
        '</elementProp>'
        for h_name, h_value in headers
    )
    header_manager = (
        '<HeaderManager guiclass="HeaderPanel" testclass="HeaderManager" testname="HTTP Header Manager">'
        f'<collectionProp name="HeaderManager.headers">{header_items}</collectionProp>'
        '</HeaderManager><hashTree/>'
        if header_items else ""
    )

    return (
        f'<HTTPSamplerProxy guiclass="HttpTestSampleGui" testclass="HTTPSamplerProxy"{name_attr}>'
        f'{"".join(props)}{arguments}'
        '</HTTPSamplerProxy>'
        f'<hashTree>{header_manager}</hashTree>'
    )


def thread_group_xml(body: str, name: str = "Thread Group") -> str:
    return (
        f'<ThreadGroup guiclass="ThreadGroupGui" testclass="ThreadGroup" testname={quoteattr(name)}>'
        '<stringProp name="ThreadGroup.num_threads">1</stringProp>'
        '</ThreadGroup>'
        f'<hashTree>{body}</hashTree>'
    )


def transaction_xml(body: str, name: str = "Transaction") -> str:
    return (
        f'<TransactionController guiclass="TransactionControllerGui" testclass="TransactionController" '
        f'testname={quoteattr(name)}/>'
        f'<hashTree>{body}</hashTree>'
    )


def jmx_xml(*thread_groups: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<jmeterTestPlan version="1.2" properties="5.0" jmeter="5.6.3"><hashTree>'
        '<TestPlan guiclass="TestPlanGui" testclass="TestPlan" testname="Plan"/>'
        f'<hashTree>{"".join(thread_groups)}</hashTree>'
        '</hashTree></jmeterTestPlan>'
    )


def plan_with_samplers(samplers: Sequence[str]) -> str:
    return jmx_xml(thread_group_xml("".join(samplers)))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Point the JMX and reports directories at a temporary tree."""
    jmx_dir = tmp_path / "jmx"
    reports_dir = tmp_path / "reports"
    jmx_dir.mkdir()
    monkeypatch.setattr(file_utils, "JMX_DIR", str(jmx_dir))
    monkeypatch.setattr(file_utils, "REPORTS_DIR", str(reports_dir))
    return tmp_path


@pytest.fixture
def ctx():
    """Stand-in for a FastMCP Context."""
    context = MagicMock()
    context.info = AsyncMock()
    context.warning = AsyncMock()
    context.error = AsyncMock()
    return context
