"""Tests for the MCP-facing correlation analysis."""
from __future__ import annotations

import json
import os
from unittest.mock import MagicMock

import pytest

import services.correlations.analyzer as analyzer
from conftest import plan_with_samplers, sampler_xml


def _write_plan(workspace, name: str, content: str) -> str:
    path = workspace / "jmx" / name
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestAnalyzeJmxCorrelations:
    @pytest.mark.asyncio
    async def test_ok_saves_report(self, workspace, ctx) -> None:
        _write_plan(workspace, "checkout.jmx", plan_with_samplers([
            sampler_xml("Cart", "/cart?cartId=cart12345678"),
            sampler_xml("Pay", "/pay", "POST", args=[("cartId", "cart12345678")]),
        ]))

        result = await analyzer.analyze_jmx_correlations("checkout.jmx", ctx)

        assert result["status"] == "OK"
        assert result["jmx_file"] == "checkout.jmx"
        report = result["report"]
        assert report["jmxFile"] == "checkout.jmx"
        assert report["samplersScanned"] == 2
        assert report["suggestions"][0]["usedInSamplers"] == ["Cart", "Pay"]

        expected_path = os.path.join(str(workspace / "reports"), "correlations", "checkout_correlations.json")
        assert result["report_path"] == expected_path
        with open(expected_path, encoding="utf-8") as f:
            assert json.load(f) == report
        ctx.info.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_report_not_saved_when_disabled(self, workspace, ctx, monkeypatch) -> None:
        monkeypatch.setattr(analyzer, "SAVE_REPORTS", False)
        _write_plan(workspace, "plain.jmx", plan_with_samplers([sampler_xml("Home", "/")]))

        result = await analyzer.analyze_jmx_correlations("plain.jmx", ctx)

        assert result["status"] == "OK"
        assert result["report_path"] is None
        assert not (workspace / "reports").exists()

    @pytest.mark.asyncio
    async def test_failed_save_keeps_the_report(self, workspace, ctx, monkeypatch) -> None:
        _write_plan(workspace, "orders.jmx", plan_with_samplers([sampler_xml("Order", "/orders/12345678")]))
        monkeypatch.setattr(analyzer, "save_correlation_report", MagicMock(side_effect=OSError("disk full")))

        result = await analyzer.analyze_jmx_correlations("orders.jmx", ctx)

        assert result["status"] == "OK"
        assert result["report_path"] is None
        assert result["report"]["correlationCandidates"] == 1
        ctx.warning.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_absolute_path(self, workspace, tmp_path) -> None:
        outside = tmp_path / "elsewhere.jmx"
        outside.write_text(plan_with_samplers([sampler_xml("Home", "/")]), encoding="utf-8")

        result = await analyzer.analyze_jmx_correlations(str(outside))

        assert result["status"] == "OK"
        assert result["report"]["jmxFile"] == "elsewhere.jmx"

    @pytest.mark.asyncio
    async def test_missing_file_is_not_found(self, workspace, ctx) -> None:
        result = await analyzer.analyze_jmx_correlations("missing.jmx", ctx)

        assert result["status"] == "NOT_FOUND"
        assert result["report"] is None
        assert "missing.jmx" in result["message"]
        ctx.error.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_malformed_file_is_error(self, workspace, ctx) -> None:
        _write_plan(workspace, "broken.jmx", "<jmeterTestPlan>")

        result = await analyzer.analyze_jmx_correlations("broken.jmx", ctx)

        assert result["status"] == "ERROR"
        assert result["message"].startswith("Invalid JMX input")

    @pytest.mark.asyncio
    async def test_path_escaping_jmx_dir_is_error(self, workspace) -> None:
        result = await analyzer.analyze_jmx_correlations("../secrets.jmx")
        assert result["status"] == "ERROR"

    def test_sync_core_raises_for_missing_file(self, workspace) -> None:
        from services.correlations import DocumentNotFoundError

        with pytest.raises(DocumentNotFoundError):
            analyzer.analyze_jmx_file("missing.jmx")
