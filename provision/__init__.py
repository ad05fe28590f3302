"""
Provisioning steps for installing a Zulip server on a fresh host.
"""
