# -*- coding: utf-8 -*-
"""
資料驗證工具 - 檢查爬蟲資料是否符合學校 JSON 規格.

Usage:
    python load/validate_school_data.py JSON/school_data_structured_test1.json

Writes <file>_validation_report.md and <file>_validation_report.json next to the input.
Exit code is 1 when errors are found.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    from .load_common import norm_spaces, read_json_file, resolve_user_path, setup_logging
except ImportError:
    from load_common import norm_spaces, read_json_file, resolve_user_path, setup_logging


logger = logging.getLogger("validate")

PLAN_TYPES = ("personal_application", "distribution_admission", "star_plan")


@dataclass
class ValidationIssue:
    severity: str  # error | warning | info
    path: str
    message: str
    actual: Any = None
    expected: Optional[str] = None


@dataclass
class ValidationReport:
    totalSchools: int
    totalDepartments: int
    issues: List[ValidationIssue]
    summary: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


class DataValidator:
    def __init__(self) -> None:
        self.issues: List[ValidationIssue] = []
        self.stats = {"schools": 0, "departments": 0, "empty_fields": 0, "type_issues": 0}

    def validate(self, data: Any) -> ValidationReport:
        if not isinstance(data, list):
            self.add_issue("error", "root", "Data must be an array of schools")
            return self.report()

        for idx, school in enumerate(data):
            self.validate_school(school, idx)
        return self.report()

    def validate_school(self, school: Dict[str, Any], index: int) -> None:
        path = f"schools[{index}]"
        self.stats["schools"] += 1

        if not isinstance(school, dict):
            self.add_issue("error", path, "School must be an object", type_name(school), "object")
            return

        for name in ("school_id", "school_name", "school_type", "school_url"):
            self.check_required(school, path, name, "string")

        images = school.get("school_images")
        if not isinstance(images, list):
            self.add_issue("error", f"{path}.school_images", "Must be an array")
        elif not images:
            self.add_issue("warning", f"{path}.school_images", "Empty images array")
            self.stats["empty_fields"] += 1

        campuses = school.get("campuses")
        if not isinstance(campuses, list):
            self.add_issue("error", f"{path}.campuses", "Must be an array")
        elif not campuses:
            self.add_issue("error", f"{path}.campuses", "At least one campus required")
        else:
            for c_idx, campus in enumerate(campuses):
                self.validate_campus(campus, f"{path}.campuses[{c_idx}]")
            if not any(isinstance(c, dict) and c.get("is_main") is True for c in campuses):
                self.add_issue("warning", f"{path}.campuses", "No main campus marked")

        departments = school.get("departments")
        if not isinstance(departments, list):
            self.add_issue("error", f"{path}.departments", "Must be an array")
        elif not departments:
            self.add_issue("warning", f"{path}.departments", "No departments found")
        else:
            for d_idx, dept in enumerate(departments):
                self.validate_department(dept, f"{path}.departments[{d_idx}]", school)

    def validate_campus(self, campus: Any, path: str) -> None:
        if not isinstance(campus, dict):
            self.add_issue("error", path, "Campus must be an object")
            return
        self.check_required(campus, path, "campus_id", "string")
        self.check_required(campus, path, "campus_name", "string")
        self.check_required(campus, path, "is_main", "boolean")

        location = campus.get("location")
        if not isinstance(location, dict):
            self.add_issue("error", f"{path}.location", "Location object required")
            return
        for name in ("city", "district", "address"):
            self.check_required(location, f"{path}.location", name, "string")

    def validate_department(self, dept: Any, path: str, school: Dict[str, Any]) -> None:
        self.stats["departments"] += 1
        if not isinstance(dept, dict):
            self.add_issue("error", path, "Department must be an object")
            return

        self.check_required(dept, path, "department_id", "string")
        self.check_required(dept, path, "department_name", "string")

        if not norm_spaces(dept.get("college")):
            self.add_issue("warning", f"{path}.college", "College is empty", dept.get("college"), "Non-empty string")
            self.stats["empty_fields"] += 1

        campus_ids = dept.get("campus_ids")
        if not isinstance(campus_ids, list):
            self.add_issue("error", f"{path}.campus_ids", "Must be an array")
        else:
            known = {
                c.get("campus_id")
                for c in school.get("campuses") or []
                if isinstance(c, dict) and isinstance(c.get("campus_id"), str)
            }
            for idx, cid in enumerate(campus_ids):
                if not isinstance(cid, str):
                    self.add_issue("error", f"{path}.campus_ids[{idx}]", "Type mismatch", type_name(cid), "string")
                    self.stats["type_issues"] += 1
                elif cid not in known:
                    self.add_issue("error", f"{path}.campus_ids", f'Campus ID "{cid}" not found in school.campuses')

        self.check_type(dept.get("years_of_study"), path, "years_of_study", "number")

        admission_data = dept.get("admission_data")
        if not isinstance(admission_data, dict):
            self.add_issue("error", f"{path}.admission_data", "Admission data object required")
            return
        for year, entry in admission_data.items():
            self.validate_admission_year(entry, f"{path}.admission_data.{year}")

    def validate_admission_year(self, entry: Any, path: str) -> None:
        plans = entry.get("plans") if isinstance(entry, dict) else None
        if not isinstance(plans, dict):
            self.add_issue("error", f"{path}.plans", "Plans object required")
            return

        for plan_type in PLAN_TYPES:
            if plans.get(plan_type):
                self.validate_plan(plans[plan_type], f"{path}.plans.{plan_type}")

        personal = plans.get("personal_application") or {}
        if entry.get("last_year_pass_data") and isinstance(personal, dict) and personal.get("last_year_pass_data"):
            self.add_issue("warning", path, "last_year_pass_data exists in both year level and plan level")

    def validate_plan(self, plan: Any, path: str) -> None:
        if not isinstance(plan, dict):
            self.add_issue("error", path, "Plan must be an object")
            return

        quota = plan.get("quota")
        if isinstance(quota, str) and quota != "":
            self.add_issue("warning", f"{path}.quota", "Quota should be number, not string", quota, "number")
            self.stats["type_issues"] += 1

        for name in ("exam_thresholds", "selection_multipliers"):
            if name not in plan:
                continue
            value = plan[name]
            if isinstance(value, str):
                self.add_issue("error", f"{path}.{name}", "Should be array, not string", value)
                self.stats["type_issues"] += 1
            elif not isinstance(value, list):
                self.add_issue("error", f"{path}.{name}", "Must be array")

        weights = plan.get("scoring_weights")
        if isinstance(weights, list):
            for idx, weight in enumerate(weights):
                if not isinstance(weight, dict) or not weight.get("source_type"):
                    self.add_issue(
                        "warning",
                        f"{path}.scoring_weights[{idx}]",
                        'Missing source_type field (should be "學測" or "分科")',
                    )

    def check_required(self, obj: Dict[str, Any], path: str, name: str, expected: str) -> None:
        if obj.get(name) is None:
            self.add_issue("error", f"{path}.{name}", "Required field missing")
        else:
            self.check_type(obj[name], path, name, expected)

    def check_type(self, value: Any, path: str, name: str, expected: str) -> None:
        actual = type_name(value)
        if actual != expected:
            self.add_issue("warning", f"{path}.{name}", "Type mismatch", actual, expected)

    def add_issue(
        self,
        severity: str,
        path: str,
        message: str,
        actual: Any = None,
        expected: Optional[str] = None,
    ) -> None:
        self.issues.append(ValidationIssue(severity, path, message, actual, expected))

    def report(self) -> ValidationReport:
        summary = {
            "errors": sum(1 for i in self.issues if i.severity == "error"),
            "warnings": sum(1 for i in self.issues if i.severity == "warning"),
            "info": sum(1 for i in self.issues if i.severity == "info"),
        }
        return ValidationReport(
            totalSchools=self.stats["schools"],
            totalDepartments=self.stats["departments"],
            issues=list(self.issues),
            summary=summary,
        )


def _listing(lines: List[str], issues: List[ValidationIssue], limit: int, with_message: bool = True) -> None:
    for issue in issues[:limit]:
        lines.append(f"- {issue.path}: {issue.message}" if with_message else f"- {issue.path}")
    if len(issues) > limit:
        lines.append(f"- ... 以及 {len(issues) - limit} 筆其他資料")
    lines.append("")


def build_markdown_report(report: ValidationReport, generated_at: Optional[datetime] = None) -> str:
    generated_at = generated_at or datetime.now()
    lines: List[str] = [
        "# 大學資料驗證報告",
        "",
        f"生成時間: {generated_at:%Y-%m-%d %H:%M:%S}",
        "",
        "## 總覽",
        "",
        f"- **學校數量**: {report.totalSchools}",
        f"- **系所數量**: {report.totalDepartments}",
        f"- **錯誤數量**: {report.summary['errors']}",
        f"- **警告數量**: {report.summary['warnings']}",
        f"- **資訊數量**: {report.summary['info']}",
        "",
    ]

    errors = [i for i in report.issues if i.severity == "error"]
    warnings = [i for i in report.issues if i.severity == "warning"]

    if not errors and not warnings:
        lines += ["## 驗證通過", "", "所有資料符合標準格式！"]
    else:
        if errors:
            lines += ["## 錯誤 (必須修正)", ""]
            for idx, issue in enumerate(errors, start=1):
                lines.append(f"### {idx}. {issue.path}")
                lines.append(f"- **問題**: {issue.message}")
                if issue.actual is not None:
                    lines.append(f"- **實際值**: `{json.dumps(issue.actual, ensure_ascii=False)}`")
                if issue.expected:
                    lines.append(f"- **預期型別**: `{issue.expected}`")
                lines.append("")

        if warnings:
            lines += ["## 警告 (建議修正)", ""]
            college_empty = [w for w in warnings if ".college" in w.path]
            type_issues = [w for w in warnings if "Type mismatch" in w.message or "should be" in w.message]
            empty_values = [w for w in warnings if "Empty" in w.message or "No" in w.message]
            grouped_ids = {id(w) for w in college_empty + type_issues + empty_values}
            others = [w for w in warnings if id(w) not in grouped_ids]

            if college_empty:
                lines += [f"### 學院欄位空值 (共 {len(college_empty)} 筆)", ""]
                _listing(lines, college_empty, 5, with_message=False)

            if type_issues:
                lines += [f"### 型別問題 (共 {len(type_issues)} 筆)", ""]
                by_message: Dict[str, List[ValidationIssue]] = {}
                for issue in type_issues:
                    by_message.setdefault(issue.message, []).append(issue)
                for message, issues in by_message.items():
                    lines.append(f"#### {message} ({len(issues)} 筆)")
                    for issue in issues[:3]:
                        lines.append(
                            f"- {issue.path}: `{json.dumps(issue.actual, ensure_ascii=False)}` → `{issue.expected}`"
                        )
                    if len(issues) > 3:
                        lines.append(f"- ... 以及 {len(issues) - 3} 筆類似問題")
                    lines.append("")

            if empty_values:
                lines += [f"### 空值/缺失資料 (共 {len(empty_values)} 筆)", ""]
                _listing(lines, empty_values, 5)

            if others:
                lines += [f"### 其他警告 (共 {len(others)} 筆)", ""]
                _listing(lines, others, 5)

    lines += ["---", "", "> 此報告由資料驗證工具自動生成"]
    return "\n".join(lines)


def validate_file(path: Path) -> ValidationReport:
    logger.info("Reading crawler data: %s", path)
    report = DataValidator().validate(read_json_file(path))

    md_path = path.with_name(f"{path.stem}_validation_report.md")
    md_path.write_text(build_markdown_report(report), encoding="utf-8")
    logger.info("Report written: %s", md_path)

    json_path = path.with_name(f"{path.stem}_validation_report.json")
    json_path.write_text(json.dumps(report.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("JSON report written: %s", json_path)
    return report


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Validate crawler school data against the school JSON format")
    ap.add_argument("file", help="Path to the crawler JSON file")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args(argv)

    setup_logging(args.log_level)
    path = resolve_user_path(args.file)
    report = validate_file(path)

    print("=" * 50)
    print(f"學校數量: {report.totalSchools}")
    print(f"系所數量: {report.totalDepartments}")
    print(f"錯誤: {report.summary['errors']}")
    print(f"警告: {report.summary['warnings']}")
    print(f"資訊: {report.summary['info']}")
    print("=" * 50)

    if report.summary["errors"] > 0:
        print("驗證失敗: 發現必須修正的錯誤")
        return 1
    if report.summary["warnings"] > 0:
        print("驗證通過但有警告: 建議檢查並修正")
    else:
        print("驗證完全通過!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
