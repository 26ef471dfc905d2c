# markable

A small Flask application for hospital staff. Staff members register and log
in to get a signed JSON Web Token; the role carried in that token decides
what they may do with patient records.

## Endpoints

| Method | Path                | Who may call it       | What it does                            |
|--------|---------------------|-----------------------|-----------------------------------------|
| GET    | `/ping`             | anyone                | answers `{"message": "pong"}`           |
| POST   | `/register`         | anyone                | creates a staff member (`201`)          |
| POST   | `/login`            | anyone                | checks the password, returns a token    |
| POST   | `/patients`         | Receptionist          | creates a patient                       |
| GET    | `/patients/<name>`  | Receptionist, Doctor  | fetches a patient by name               |
| DELETE | `/patients/<name>`  | Receptionist          | deletes a patient by name               |
| PATCH  | `/patients/<name>`  | Receptionist, Doctor  | updates age, gender, address, diagnosis |

Every `/patients` route needs an `Authorization: Bearer token` header carrying
a token from `/login`. Tokens are signed with HS256 and expire one hour after
they are issued.

- A missing header, a header without the `Bearer ` prefix, or a bad or expired
  token gives `401`.
- A token without a string `role` claim gives `404` (`"Role not found"`).
- A role that is not allowed on the route gives `403` (`"Permission denied"`).

### Request bodies

Registration and login take the same body; keys are matched without regard
to case:

```json
{"username": "alice", "password": "password", "role": "Receptionist"}
```

Login answers `404` for an unknown user and `401` for a wrong password;
passwords longer than 72 bytes are refused at registration with `500`.

Creating a patient needs a non-empty `name`, a non-zero integer `age` and a
non-empty `gender`; `address` is optional:

```json
{"name": "Bob", "age": 42, "gender": "male", "address": "1 Example Street"}
```

Updating a patient takes any of `age`, `gender`, `address` and `diagnosis`.
Fields left out keep their current value; an empty string clears `address`
or `diagnosis`.

### Responses

`POST /patients`, `PATCH /patients/<name>` and `POST /register` answer with
the stored record using the keys `ID`, `Name`, `Age`, `Gender`, `Address`,
`Diagnosis`, `CreatedAt`, `UpdatedAt` (patients) or `ID`, `Name`, `Role`,
`CreatedAt`, `UpdatedAt`, `PwHash` (staff). Optional text fields appear as
`{"String": ..., "Valid": ...}`. `GET /patients/<name>` answers with `name`,
`age`, `id`, `gender`, `diagnosis`, `admitted_at` and `updated_at`.

## Using it from Python

The application is built around a `markable.models.State`, which holds the
queries (`markable.database.Queries`) and a configuration object whose
`jwt_secret` attribute is the token signing key. `markable.server.create_app`
turns a state into a Flask application.

`markable.server.connect_db` opens an SQLite database from a `sqlite://` URL
(`sqlite:///file.db`, `sqlite:////absolute/path.db` or `sqlite:///:memory:`)
and checks that it answers. The tables must already exist:

```python
from types import SimpleNamespace

from markable.database import Queries
from markable.models import State
from markable.server import connect_db, create_app

db = connect_db("sqlite:///markable.db")
cursor = db.cursor()
cursor.execute(
    "CREATE TABLE IF NOT EXISTS staff (id TEXT PRIMARY KEY, name TEXT UNIQUE, role TEXT,"
    " created_at TEXT, updated_at TEXT, pw_hash TEXT)"
)
cursor.execute(
    "CREATE TABLE IF NOT EXISTS patients (id TEXT PRIMARY KEY, name TEXT UNIQUE, age INTEGER,"
    " gender TEXT, address TEXT, diagnosis TEXT, created_at TEXT, updated_at TEXT)"
)
cursor.close()

state = State(Queries(db), SimpleNamespace(jwt_secret="secret"))
app = create_app(state)
app.run(port=8888)
```

`Queries` works with any object that has a `cursor()` method whose cursors
take `%s` placeholders; a query that finds no row raises
`markable.database.NoRowsError`.

The lower-level pieces can be used on their own:

- `markable.auth.hash_password`, `markable.auth.match_password` and
  `markable.auth.generate_jwt` for bcrypt hashing (cost 12) and token creation;
- `markable.middleware.authorize_token` (a before-request hook that stores the
  token's claims in `flask.g.user`) and `markable.middleware.required_role`
  (a view decorator) for guarding your own routes;
- `markable.api` for the individual request handlers.

## What it does not do

- There is no command to start the server and no configuration file loading:
  build the configuration object yourself and run the app returned by
  `create_app`.
- It does not create or migrate the database tables.
- `connect_db` understands only `sqlite://` URLs. `Queries.drop_rows` issues
  `TRUNCATE TABLE`, which SQLite does not support.