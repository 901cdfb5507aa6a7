import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from coreason_pr_conventions.domain.models import PullRequestMetadata, ValidationResult

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class MarkdownReporter:
    def __init__(self, template_dir: Optional[str | Path] = None) -> None:
        self.env = Environment(loader=FileSystemLoader(str(template_dir or DEFAULT_TEMPLATE_DIR)))
        self.template = self.env.get_template("summary.md.j2")

    def generate_report(self, result: ValidationResult, metadata: PullRequestMetadata) -> str:
        checks: List[Dict[str, Any]] = [
            {
                "name": message.check,
                "status": message.severity.value,
                "text": message.text,
                "details": message.details,
            }
            for message in result.messages
        ]

        context = {
            "number": metadata.number,
            "title": metadata.title,
            "branch_name": metadata.branch_name,
            "commit_count": len(metadata.commits),
            "timestamp": datetime.datetime.now(datetime.timezone.utc).strftime("%Y-%m-%d %H:%M:%S"),
            "final_status": "SUCCESS" if result.passed else "FAILURE",
            "checks_count": len(result.messages),
            "checks_passed": len(result.messages) - len(result.failures),
            "checks_failed": len(result.failures),
            "checks": checks,
        }

        return self.template.render(context)

    def write(self, result: ValidationResult, metadata: PullRequestMetadata, path: Path) -> None:
        """
        Appends the summary, so it composes with other steps writing GITHUB_STEP_SUMMARY.
        """
        with open(path, "a", encoding="utf-8") as f:
            f.write(self.generate_report(result, metadata))
