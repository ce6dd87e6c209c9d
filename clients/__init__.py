# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    vault_configured,
    get_database_url,
    get_valkey_url,
    get_admin_credentials,
    clear_secret_cache,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
