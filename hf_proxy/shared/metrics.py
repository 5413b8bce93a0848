#!/usr/bin/env python3
"""
Metrics definitions for the Hugging Face OpenAI proxy.
"""

import prometheus_client

UPSTREAM_REQUESTS = prometheus_client.Counter(
    'hf_proxy_upstream_requests_total', 'Requests sent to the inference API', ['model', 'stream']
)
UPSTREAM_ERRORS = prometheus_client.Counter(
    'hf_proxy_upstream_errors_total', 'Failed requests to the inference API', ['model', 'kind']
)
STREAM_EVENTS = prometheus_client.Counter(
    'hf_proxy_stream_events_total', 'Chunk events relayed to streaming clients'
)
STREAMS = prometheus_client.Counter(
    'hf_proxy_streams_total', 'Finished streaming relays by outcome', ['outcome']
)
ACTIVE_STREAMS = prometheus_client.Gauge('hf_proxy_active_streams', 'Streaming relays currently open')
