# cloudconnector

Building blocks for a service that keeps track of hosts connected over MQTT
and reports them to other platform services.

## Modules

- `cloudconnector.domain`: the state kept for a connected client
  (`ConnectorClientState`, `MessageMetadata`).
- `cloudconnector.topic`: building and checking MQTT topics of the form
  `<prefix>/insights/<client id>/<control|data>/<in|out>` (`TopicBuilder`,
  `TopicVerifier`, `TopicType`, `TopicError`). The prefix defaults to `redhat`.
- `cloudconnector.identity`: decoding the base64 JSON identity header
  (`decode_identity`) and telling whether it says the request was
  authenticated with a certificate (`authenticated_with_certificate`).
  Failures raise `IdentityError`.
- `cloudconnector.auth`: WSGI middleware. `enforce_identity` requires a valid
  `x-rh-identity` header. `AuthMiddleware.authenticate` uses that header when
  it is present and otherwise checks the pre-shared key headers
  (`x-rh-cloud-connector-client-id`, `-org-id`, `-account`, `-psk`) against a
  mapping of known keys. `enforce_turnpike_authentication` admits only
  `Associate` identities. Failed authentication answers
  `401 Authentication failed`.
- `cloudconnector.principal`: `get_principal(environ)` returns the
  `ServiceToServicePrincipal` or `IdentityPrincipal` the middleware stored,
  or `None`.
- `cloudconnector.inventory`: turning a connected client into an inventory
  `add_host` JSON message and passing it to a producer callable
  (`InventoryBasedConnectedClientRecorder`, `FakeConnectedClientRecorder`,
  `new_connected_client_recorder`, `cleanup_canonical_facts`,
  `convert_rhc_tags_to_inventory_tags`,
  `should_host_be_registered_with_inventory`). A host is registered only when
  the identity is non-empty, it has canonical facts, and it advertises one of
  the `rhc-worker-playbook`, `package-manager` or `rhc-worker-script`
  dispatchers.
- `cloudconnector.pendo`: `make_request` posts per-account connection counts
  to `<endpoint>/metadata/account/custom/value`; `PendoReporter` batches them
  (`add`, `flush`). Failures raise `PendoError`.
- `cloudconnector.handlers`: MQTT message handlers. `control_message_handler`
  forwards non-empty control messages to a Kafka writer callable as a
  `KafkaMessage` keyed by client id, with `topic`, `mqtt_message_id` and
  `date_received` headers, and raises `KafkaWriteError` if the write fails.
  `data_message_handler` only logs. `default_message_handler` routes by topic
  type.
- `cloudconnector.queue`: Kafka producer, consumer and SASL settings
  (`ProducerConfig`, `ConsumerConfig`, `SaslConfig`) and
  `resolve_sasl_mechanism` for `plain`, `scram-sha-256` and `scram-sha-512`.
- `cloudconnector.tls`: `new_tls_config` builds a client `ssl.SSLContext`
  (TLS 1.2 or later) from `with_cert`, `with_ca_certs` and `with_skip_verify`.
- `cloudconnector.jwt_tokens`: RS256 token signing (`create_rsa_token`) and
  token generators read from a file or signed with an RSA private key
  (`new_file_based_jwt_generator`, `new_rsa_based_jwt_generator`).
- `cloudconnector.database`: `DatabaseSettings` and the PostgreSQL connection
  string (`build_connection_info`, `build_postgres_ssl_config_string`).

## Installing

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Example: MQTT topics

```python
from cloudconnector.topic import TopicBuilder, TopicVerifier, TopicError

builder = TopicBuilder("staging")
builder.build_outgoing_data_topic("client-a")
# 'staging/insights/client-a/data/in'
builder.build_incoming_wildcard_control_topic()
# 'staging/insights/+/control/out'

verifier = TopicVerifier("staging")
topic_type, client_id = verifier.verify_incoming_topic(
    "staging/insights/client-a/control/out"
)

try:
    verifier.verify_incoming_topic("redhat/insights/client-a/control/out")
except TopicError as exc:
    print("rejected:", exc)
```

## Example: authenticating a WSGI application

```python
from cloudconnector.auth import AuthMiddleware, RequiredTenantIdentifier
from cloudconnector.principal import get_principal


def app(environ, start_response):
    principal = get_principal(environ)
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [principal.org_id.encode()]


auth = AuthMiddleware(
    secrets={"client-a": "secret"},
    required_tenant_identifier=RequiredTenantIdentifier.ORG_ID,
)
application = auth.authenticate(app)
```

## What the package does not do

It holds no MQTT client, Kafka client, HTTP server or database driver. The
handlers, recorders and reporter are given callables that do the writing;
`build_connection_info` only builds the connection string. There is no
command-line program and no service that runs by itself.

## Running the tests

```
pytest
```