"""
Argo-render renders the Kubernetes manifests of an application from a Helm chart and a Kustomize overlay, expanding
templates against pluggable datasources (local files, remote Terraform state) along the way. It is meant to be used
as an ArgoCD ConfigManagementPlugin.
"""

__version__ = "0.1.0"
