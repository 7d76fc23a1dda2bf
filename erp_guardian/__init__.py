"""ERP Guardian.

This package contains the guardrail used to vet tool calls that an AI agent
proposes against an ERP back-end (stock lookups, invoices, product updates,
document deletion) before any of them is committed.

High-level architecture
-----------------------

Every proposed tool call flows through a single deterministic pipeline:

- **Verification (CoVe)**: mutating calls are grounded first by running the
  read-only lookups they depend on.
- **Guardian**: caller-supplied rules and built-in business checks merge into
  one allow/reject/warn/require-confirmation decision.
- **Confidence**: a heuristic score in [0, 1] for the proposed call.
- **Diff preview**: a before/after projection shown to the user.

Core subpackages
----------------

- ``erp_guardian.agent_core``: schemas, policy (rules, semantic checks,
  guardian), tool registry contract, verification planner and pipeline,
  confidence scoring and diff previews.
- ``erp_guardian.core``: settings and logging configuration.

Typical workflow
----------------

Most integrations should use ``erp_guardian.agent_core.factory.build_pipeline``
and call ``VerificationPipeline.process_tools`` with the batch of tool calls
and the rules sent by the client.
"""
