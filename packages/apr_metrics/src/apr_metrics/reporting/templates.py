# apr_metrics/reporting/templates.py

REPORT_MD_TEMPLATE = """# AI Participation Audit Report

## Submission
- **file:** {{ file_name }}
- **status:** {{ status }}
- **audit id:** {{ audit_id }}
- **learning time:** {{ score.total_minutes }} min

## Audit horizon
- **horizon (epoch ms):** {{ horizon }}
- **events used:** {{ counts.events_used }} / {{ counts.events_total }}
- **exchanges used:** {{ counts.exchanges_used }} / {{ counts.exchanges_total }}
- **effort intervals:** {{ intervals }}
- **influence windows:** {{ windows }} (tau = {{ params.tau_ms }} ms)

## Score summary
| Category | Metric | Value | Notes |
|---|---:|---:|---|
| Headline | APR | {{ score.ratio }}% | effort inside AI influence windows |
| Breakdown | Self | {{ score.self_pct }}% | independent work |
| Breakdown | Assist | {{ score.assist_pct }}% | influenced, weight < theta ({{ params.theta }}) |
| Breakdown | Collab | {{ score.collab_pct }}% | influenced, weight >= theta |

- **mode:** {{ mode }}
- **pattern:** {{ score.pattern }}
- **tags:** {{ tags }}

## Diagnostics
### Warnings
{{ warnings }}

## Reproducibility
- **artifact:** {{ artifact_path }}
- **library versions:** apr-metrics {{ version_metrics }}, apr-logging {{ version_logging }}
- **generated at:** {{ generated_at }}
"""
