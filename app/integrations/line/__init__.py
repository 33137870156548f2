"""LINE Integration Package.

Contains the LINE Messaging API client used for personal push messages:

- client: Flex message construction and the push endpoint call.
"""
