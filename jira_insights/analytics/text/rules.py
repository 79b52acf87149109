"""Default rule tables for service desk text classification.

Order matters for first-match tables: categories are assumed mutually
exclusive and the earliest rule wins.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .classifier import Rule

# Root cause of incidents, problems and build issues (first match)
ROOT_CAUSE_RULES: Sequence[Rule] = (
    Rule.keywords("Build / Pipeline Failure", "build", "pipeline", "ci", "compile", "jenkins", "azure devops"),
    Rule.keywords("Deployment / Release", "deploy", "deployment", "release", "rollout", "rollback", "octopus"),
    Rule.keywords("Certificate / Expiry", "certificate", "cert", "ssl", "tls", "expired", "expiry"),
    Rule.keywords("Access / Authentication", "access", "permission", "permissions", "login", "sso", "mfa", "password"),
    Rule.keywords("Network / Connectivity", "network", "dns", "vpn", "firewall", "timeout", "connectivity", "proxy"),
    Rule.keywords("Database", "database", "db", "sql", "postgres", "deadlock", "query"),
    Rule.keywords("Capacity / Performance", "disk", "storage", "memory", "cpu", "capacity", "slow", "latency"),
    Rule.keywords("Monitoring / Alerting", "alert", "alerts", "monitoring", "pagerduty", "datadog"),
)

# Applications and technologies mentioned in a ticket (all matches)
APPLICATION_RULES: Sequence[Rule] = (
    Rule.keywords("Azure", "azure"),
    Rule.keywords("AWS", "aws", "ec2", "s3", "lambda"),
    Rule.keywords("GitHub", "github"),
    Rule.keywords("Azure DevOps", "azure devops", "ado"),
    Rule.keywords("Jenkins", "jenkins"),
    Rule.keywords("Jira", "jira"),
    Rule.keywords("Confluence", "confluence"),
    Rule.keywords("Kubernetes", "kubernetes", "k8s", "aks", "eks"),
    Rule.keywords("Docker", "docker", "container"),
    Rule.keywords("Terraform", "terraform"),
    Rule.keywords("Octopus", "octopus"),
    Rule.keywords("SonarQube", "sonarqube", "sonar"),
    Rule.keywords("Active Directory", "active directory", "ad", "entra"),
    Rule.keywords("VPN", "vpn"),
    Rule.keywords("Slack", "slack"),
    Rule.keywords("Teams", "teams"),
    Rule.keywords("Salesforce", "salesforce"),
)

# Sub-categories per service desk request type (first match)
REQUEST_SUBCATEGORY_RULES: Mapping[str, Sequence[Rule]] = {
    "Access Request": (
        Rule.keywords("Repository Access", "repo", "repository", "github", "bitbucket"),
        Rule.keywords("Cloud Console Access", "azure", "aws", "subscription", "console"),
        Rule.keywords("Group Membership", "group", "distribution list", "ad", "security group"),
        Rule.keywords("Tool Licence", "licence", "license", "seat"),
    ),
    "Service Request": (
        Rule.keywords("Environment Setup", "environment", "env", "sandbox", "provision"),
        Rule.keywords("Pipeline Change", "pipeline", "build", "release"),
        Rule.keywords("DNS / Certificates", "dns", "domain", "certificate", "ssl"),
        Rule.keywords("Secrets / Keys", "secret", "key vault", "api key", "token"),
    ),
    "Incident": (
        Rule.keywords("Outage", "down", "outage", "unavailable", "502", "503"),
        Rule.keywords("Degradation", "slow", "latency", "degraded", "intermittent"),
        Rule.keywords("Failed Job", "failed", "failing", "error"),
    ),
}

DEFAULT_SUBCATEGORY_RULES: Sequence[Rule] = (
    Rule.keywords("Access", "access", "permission", "login"),
    Rule.keywords("Build / Deploy", "build", "deploy", "pipeline", "release"),
    Rule.keywords("Infrastructure", "server", "vm", "network", "dns", "storage"),
)
