"""
General-purpose helpers not related to the Kubernetes resources themselves,
which are used to prepare and control the runtime environment.

These are things that should better be in the standard library
or in the dependencies.

Helpers do not depend on anything else in the package. For most cases,
they do not even implement any entities or behaviours of the domain
of resource waiting, but rather some unrelated low-level patterns.
"""
