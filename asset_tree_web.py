"""Web UI for browsing and filtering company asset trees."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from flask import (
    Flask,
    abort,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from werkzeug.wrappers import Response

from asset_source import JsonDataSource
from domain_data import collect_companies, collect_tree
from domain_types import Company, FilterCriteria, TreeNode
from tree_filters import apply_filters
from tree_ordering import order_siblings
from tree_render import (
    count_nodes,
    default_expanded_ids,
    node_path,
    node_to_dict,
    visible_rows,
)


__all__ = ["run_web_app", "create_app", "create_app_from_env"]

_TRUTHY = {"1", "true", "yes", "on"}


def create_app(source: JsonDataSource) -> Flask:
    """Create the Flask app wired to the provided data source."""
    template_dir = Path(__file__).resolve().parent / "templates"
    app = Flask(__name__, template_folder=str(template_dir))
    app.config["SECRET_KEY"] = os.getenv(
        "FLASK_SECRET_KEY", "asset-tree-ui")

    def _flag(name: str) -> bool:
        return (request.args.get(name) or "").lower() in _TRUTHY

    def _parse_criteria() -> FilterCriteria:
        return FilterCriteria(
            energy_sensors=_flag("energy"),
            critical_status=_flag("critical"),
        )

    def _parse_expanded() -> set[str] | None:
        """Explicit expanded ids, or ``None`` when the page is fresh."""
        if "expanded" not in request.args:
            return None
        return {node_id for node_id in request.args.getlist("expanded") if node_id}

    def _state_params(
        search: str,
        criteria: FilterCriteria,
        selected_id: str | None,
        expanded: set[str],
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if search:
            params["q"] = search
        if criteria.energy_sensors:
            params["energy"] = "1"
        if criteria.critical_status:
            params["critical"] = "1"
        if selected_id:
            params["selected"] = selected_id
        # An empty value still marks the expansion state as explicit.
        params["expanded"] = sorted(expanded) or [""]
        return params

    def _load_company(company_key: str) -> Company:
        company = source.get_company(company_key)
        if company is None:
            abort(404, description=f"Unknown company '{company_key}'.")
        return company

    def _detail(path: list[TreeNode]) -> dict[str, Any] | None:
        if not path:
            return None
        node = path[-1]
        return {
            "id": node.id,
            "name": node.name,
            "type": str(node.type),
            "status": str(node.status) if node.status else "",
            "sensor_type": str(node.sensor_type) if node.sensor_type else "",
            "sensor_id": node.sensor_id or "",
            "gateway_id": node.gateway_id or "",
            "parent_type": str(node.parent_type) if node.parent_type else "",
            "path": " / ".join(ancestor.name for ancestor in path[:-1]),
        }

    @app.route("/", methods=["GET"])
    def index() -> Response | str:  # pyright: ignore[reportUnusedFunction]
        return redirect(url_for("companies_index"))

    @app.route("/companies", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def companies_index() -> Response | str:
        try:
            companies = collect_companies(source)
        except RuntimeError as exc:
            app.logger.error("Failed to load companies: %s", exc)
            return Response(f"Failed to load companies: {exc}", status=500)

        rows = [
            {
                "id": company.id,
                "name": company.name or company.id,
                "link": url_for("company_tree", company_key=company.id),
            }
            for company in companies
        ]
        return render_template("companies.html", companies=rows)

    @app.route("/companies/<company_key>", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def company_tree(company_key: str) -> Response | str:
        company = _load_company(company_key)
        try:
            tree = collect_tree(source, company.id)
        except (RuntimeError, ValueError) as exc:
            app.logger.error("Failed to load tree for %s: %s", company.id, exc)
            return Response(f"Failed to load assets: {exc}", status=500)

        search = request.args.get("q", "")
        criteria = _parse_criteria()
        filtered = apply_filters(tree, search, criteria)
        filtering = bool(search.strip()) or criteria.is_active

        selected_id = request.args.get("selected") or None
        selected_path = node_path(tree, selected_id)

        expanded = _parse_expanded()
        if expanded is None:
            expanded = default_expanded_ids(filtered, expand_all=filtering)
            expanded.update(ancestor.id for ancestor in selected_path[:-1])

        rows: list[dict[str, Any]] = []
        for node, depth in visible_rows(filtered, expanded):
            has_children = bool(node.children)
            is_open = has_children and node.id in expanded
            if not has_children:
                next_expanded = expanded
                next_selected: str | None = node.id
            elif is_open:
                next_expanded = expanded - {node.id}
                next_selected = selected_id
            else:
                next_expanded = expanded | {node.id}
                next_selected = node.id
            rows.append(
                {
                    "id": node.id,
                    "name": node.name,
                    "type": str(node.type),
                    "status": str(node.status) if node.status else "",
                    "sensor_type": str(node.sensor_type) if node.sensor_type else "",
                    "depth": depth,
                    "has_children": has_children,
                    "is_open": is_open,
                    "is_selected": node.id == selected_id,
                    "link": url_for(
                        "company_tree",
                        company_key=company.id,
                        **_state_params(
                            search, criteria, next_selected, next_expanded
                        ),
                    ),
                }
            )

        if rows:
            empty_message = None
        elif filtering:
            empty_message = "No results found. Try different search terms."
        else:
            empty_message = "No items available."

        counts = count_nodes(filtered)
        return render_template(
            "tree.html",
            company=company,
            rows=rows,
            search=search,
            criteria=criteria,
            empty_message=empty_message,
            selected=_detail(selected_path),
            counts={str(node_type): count for node_type, count in counts.items()},
            json_link=url_for(
                "company_tree_json",
                company_key=company.id,
                q=search or None,
                energy="1" if criteria.energy_sensors else None,
                critical="1" if criteria.critical_status else None,
            ),
        )

    @app.route("/companies/<company_key>/tree.json", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def company_tree_json(company_key: str) -> Response | tuple[Response, int]:
        company = _load_company(company_key)
        try:
            tree = collect_tree(source, company.id)
        except (RuntimeError, ValueError) as exc:
            app.logger.error("Failed to load tree for %s: %s", company.id, exc)
            return jsonify({"error": str(exc)}), 500

        filtered = apply_filters(
            tree, request.args.get("q", ""), _parse_criteria())
        return jsonify(
            {
                "company": {"id": company.id, "name": company.name},
                "tree": [node_to_dict(root) for root in order_siblings(filtered)],
            }
        )

    return app


def create_app_from_env() -> Flask:
    """Create the Flask app using ASSET_TREE_* environment variables."""
    load_dotenv()
    source = JsonDataSource(os.getenv("ASSET_TREE_DATA_DIR", ""))
    return create_app(source)


def run_web_app(
    source: JsonDataSource,
    host: str,
    port: int,
) -> None:
    """Launch a lightweight Flask app for browsing asset trees."""
    app = create_app(source)

    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in _TRUTHY
        if use_reloader_env is not None
        else True
    )
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the web UI."""
    parser = argparse.ArgumentParser(
        description="Asset tree web UI"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP for the web UI (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port for the web UI (default: 4000).",
    )
    parser.add_argument(
        "--data-dir",
        default=os.getenv("ASSET_TREE_DATA_DIR", ""),
        help="Data directory (defaults to ASSET_TREE_DATA_DIR).",
    )

    args = parser.parse_args(argv)

    try:
        source = JsonDataSource(args.data_dir)
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    run_web_app(
        source=source,
        host=args.host,
        port=args.port,
    )
    return 0


if __name__ == "__main__":
    load_dotenv()
    main()
