# watchtower

Building blocks for keeping running containers up to date: choosing which
containers to watch, reading the labels that steer their updates, working
out the configuration needed to recreate them, handling command-line flags
and their environment-backed defaults, and a small token-protected HTTP API
for triggering update scans.

The package has no runtime dependencies beyond the Python standard library
and supports Python 3.10 and later.

## Modules

- `watchtower.util` — list and mapping helpers (`slice_equal`,
  `slice_subtract`, `string_map_subtract`, `struct_map_subtract`), random
  identifiers (`rand_name`, `generate_random_sha256`,
  `generate_random_prefixed_sha256`) and the `VERSION` and `USER_AGENT`
  strings.
- `watchtower.filters` — composable container filters
  (`no_filter`, `watchtower_containers_filter`, `filter_by_names`,
  `filter_by_enable_label`, `filter_by_disabled_label`, `filter_by_scope`,
  `filter_by_image`) and `build_filter`, which returns a filter together
  with a description of what it selects.
- `watchtower.container` — the `Container` model, built from Docker
  inspection data (dictionaries) for the container and its image: ID,
  name, state, image ID and name, links, enable / monitor-only / no-pull /
  scope labels, lifecycle commands, hook timeouts, stop signal, and
  `get_create_config` / `get_create_host_config` for recreating it.
  `verify_configuration` raises `NoImageInfoError`, `NoContainerInfoError`
  or `InvalidConfigError`, all subclasses of `ContainerConfigError`.
  `short_id` shortens image and container IDs and
  `contains_watchtower_label` checks a label mapping.
- `watchtower.cgroup` — `container_id_from_cgroup` extracts a Docker
  container ID from cgroup text; `get_running_container_id` reads
  `/proc/<pid>/cgroup` for the current process.
- `watchtower.flags` — a `FlagSet` of typed `Flag`s (`FlagKind`) with a
  small command-line parser, an `Environment` that supplies defaults from
  environment variables, the `register_docker_flags`,
  `register_system_flags` and `register_notification_flags` definitions,
  `env_config`, `read_flags`, `get_secrets_from_files`, `is_file`,
  `parse_duration` and `process_flag_aliases`. Problems are raised as
  `FlagError`.
- `watchtower.api` — the `API` server (`ApiRequest`, `ApiResponse`,
  `ApiError`) that checks a bearer token on every request.
- `watchtower.update_handler` — the `UpdateHandler` that runs one update
  scan at a time.

## Filtering containers

```python
from watchtower.filters import build_filter

container_filter, description = build_filter(["web", "db"], False, "")
print(description)
# Only checking containers which name matches "web" or "db"
```

Names are matched exactly (with or without the leading `/`) or as regular
expressions that cover the whole name. Containers whose
`com.centurylinklabs.watchtower.enable` label is false are always left
out; with `enable_label` true only containers carrying that label are
considered, and a non-empty scope limits the selection to containers whose
`com.centurylinklabs.watchtower.scope` label has the same value.

## Flags

```python
from watchtower.flags import (
    FlagSet,
    process_flag_aliases,
    register_system_flags,
    set_defaults,
)

env = set_defaults({})
flags = FlagSet()
register_system_flags(flags, env)
flags.parse(["--interval", "10", "--debug"])
process_flag_aliases(flags)

flags.get("schedule")   # "@every 10s"
flags.get("log-level")  # "debug"
```

Setting both a schedule and an interval, or a porcelain version other than
`v1`, raises `FlagError`. `get_secrets_from_files` replaces password,
token, hook and notification URL values that name an existing file with
that file's contents, and `env_config` exports the Docker host, TLS and API
version flags into an environment mapping.

## HTTP API

```python
from watchtower.api import API
from watchtower.update_handler import UpdateHandler

def run_update(images):
    ...

api = API(token="token", port=8080)
handler = UpdateHandler(run_update, None)
api.register_func(handler.path, handler.handle)
api.start(False)
```

Requests must carry the header `Authorization: Bearer token`; anything
else is answered with 401, and unknown paths with 404. Starting with no
registered endpoints does nothing; starting with an empty token raises
`ApiError`. Requests naming images through the `image` query parameter
wait for a running update to finish, while requests without images are
skipped if an update is already in progress. `api.stop()` shuts the server
down.

## What this package does not do

There is no command to run and no client for the Docker daemon: the
package does not list, stop, pull, start or remove containers, does not
schedule update runs, does not send notifications and does not serve
metrics. It provides the pieces such a program would be built from.

## Tests

The test suite uses pytest, installed through the `test` extra.