"""
file_utils.py

This module contains utility functions for file operations.
Correlation reports, generated JMX scripts and run directories all live
under the directories configured in config.yaml:
  <jmx_dir>/                      .jmx scripts (input and generated)
  <reports_dir>/<run_id>/         JMeter run output (result.jtl, html/)
  <reports_dir>/correlations/     correlation reports
"""
import xml.etree.ElementTree as ET
import json
import os
from typing import Any, Dict
from xml.dom import minidom

from utils.config import load_config, get_jmx_dir, get_reports_dir

# === Global configuration ===
CONFIG = load_config()
JMX_DIR = get_jmx_dir(CONFIG)
REPORTS_DIR = get_reports_dir(CONFIG)


def resolve_jmx_path(jmx_file: str) -> str:
    """
    Absolute paths are used as given; anything else is looked up in <jmx_dir>.

    Raises:
        ValueError: if jmx_file is empty or a relative name escapes <jmx_dir>.
    """
    if not jmx_file:
        raise ValueError("jmx_file is required")
    if os.path.isabs(jmx_file):
        return jmx_file

    jmx_root = os.path.abspath(JMX_DIR)
    candidate = os.path.abspath(os.path.join(jmx_root, jmx_file))
    if os.path.commonpath([jmx_root, candidate]) != jmx_root:
        raise ValueError(f"jmx_file must stay inside the JMX directory: {jmx_file}")
    return candidate


def get_run_dir(run_id: str, create: bool = False) -> str:
    """
    Returns the directory holding a JMeter run's artifacts:
      <reports_dir>/<run_id>/

    Raises:
        ValueError: if run_id is empty or resolves outside <reports_dir>.
    """
    if not run_id:
        raise ValueError("run_id is required")
    reports_root = os.path.abspath(REPORTS_DIR)
    run_dir = os.path.abspath(os.path.join(reports_root, str(run_id)))
    if run_dir == reports_root or os.path.commonpath([reports_root, run_dir]) != reports_root:
        raise ValueError(f"run_id must name a directory inside the reports directory: {run_id}")
    if create:
        os.makedirs(run_dir, exist_ok=True)
    return run_dir


def get_correlation_reports_dir() -> str:
    output_dir = os.path.join(REPORTS_DIR, "correlations")
    os.makedirs(output_dir, exist_ok=True)
    return output_dir


def save_json_file(data: Dict[str, Any], output_path: str) -> str:
    os.makedirs(os.path.dirname(output_path), exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return output_path


def save_correlation_report(jmx_file: str, report: Dict[str, Any]) -> str:
    """
    Saves a correlation report as:
      <reports_dir>/correlations/<jmx stem>_correlations.json

    Returns the full output file path.
    """
    stem = os.path.splitext(os.path.basename(jmx_file))[0]
    output_file = os.path.join(get_correlation_reports_dir(), f"{stem}_correlations.json")
    return save_json_file(report, output_file)


def save_jmx_file(root_element: ET.Element, filename: str) -> str:
    """
    Saves the given XML tree (root_element) as a pretty-printed JMX file
    under <jmx_dir>/<filename>.

    Returns the full output file path.
    """
    os.makedirs(JMX_DIR, exist_ok=True)
    output_file = os.path.join(JMX_DIR, filename)

    xml_string = ET.tostring(root_element, encoding="utf-8")
    pretty_xml = minidom.parseString(xml_string).toprettyxml(indent="  ")

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(pretty_xml)

    return output_file
