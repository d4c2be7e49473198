from .policy import AccessPolicy, Policy, Resource, project_resource, user_resource

__all__ = ["AccessPolicy", "Policy", "Resource", "project_resource", "user_resource"]
