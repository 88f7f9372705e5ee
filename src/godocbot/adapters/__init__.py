"""Adapters binding the domain ports to GitHub and Kubernetes."""
