"""reqprep effective - assemble the executable form of a request."""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import fields

from reqprep.body import materialize_body
from reqprep.computed import computed_headers, computed_params
from reqprep.models import EffectiveRequest, Environment, KeyValue, Request, Variable
from reqprep.scope import global_variables, merge_scope
from reqprep.templating import resolve_template

logger = logging.getLogger(__name__)

GlobalsProvider = Callable[[], Sequence[Variable]]


def _resolve_rows(rows: Iterable[KeyValue], scope: Sequence[Variable]) -> tuple[KeyValue, ...]:
    """Drop disabled and keyless rows, then resolve each key and value."""
    return tuple(
        KeyValue(
            key=resolve_template(row.key, scope),
            value=resolve_template(row.value, scope),
        )
        for row in rows
        if row.active and row.key != ""
    )


def get_effective_request(
    request: Request,
    environment: Environment,
    globals_provider: GlobalsProvider = global_variables,
) -> EffectiveRequest:
    """Outputs an executable request with environment variables applied.

    Headers and params are computed rows followed by the declared ones.
    Local request vars only apply to the endpoint URL.
    """
    scope = merge_scope(environment.variables, tuple(globals_provider()))

    final_headers = _resolve_rows(
        [*(c.header for c in computed_headers(request, scope)), *request.headers],
        scope,
    )
    final_params = _resolve_rows(
        [*(c.param for c in computed_params(request, scope)), *request.params],
        scope,
    )
    final_body = materialize_body(request.body, scope)
    final_url = resolve_template(request.endpoint, scope, request.vars)

    logger.debug(
        "Resolved %s %s (%d headers, %d params)",
        request.method,
        final_url,
        len(final_headers),
        len(final_params),
    )

    # Only the declared Request fields are copied, so re-resolving an
    # EffectiveRequest replaces its previous final_* values.
    declared = {f.name: getattr(request, f.name) for f in fields(Request)}
    return EffectiveRequest(
        **declared,
        final_url=final_url,
        final_headers=final_headers,
        final_params=final_params,
        final_body=final_body,
        final_vars=request.vars,
    )
