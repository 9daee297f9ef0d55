from aclx import Acl


def main() -> None:
    acl = Acl()

    acl.add_role("guest")
    acl.add_role("staff", ["guest"])
    acl.add_role("editor", ["staff"])
    acl.add_role("admin")

    # guest may only view content
    acl.allow("guest", None, "view")
    # staff inherits view from guest
    for priv in ("edit", "submit", "revise"):
        acl.allow("staff", None, priv)
    for priv in ("publish", "archive", "delete"):
        acl.allow("editor", None, priv)
    # admin inherits nothing but may do anything
    acl.allow("admin")

    acl.add_role("marketing", ["staff"])
    acl.add_resource("newsletter")
    acl.add_resource("news")
    acl.add_resource("latest", "news")
    acl.add_resource("announcement", "news")

    acl.allow("marketing", "newsletter", "publish")
    acl.allow("marketing", "latest", "archive")
    acl.deny("staff", "latest", "revise")
    # nobody, admins included, archives announcements
    acl.deny(None, "announcement", "archive")

    # only the owner of a draft may delete it
    acl.allow("staff", "news", "delete", assertion=lambda role, res, priv, ctx: (ctx or {}).get("owner") == role)

    for query in [
        ("marketing", "newsletter", "publish", None),
        ("marketing", "latest", "revise", None),
        ("admin", "announcement", "archive", None),
        ("staff", "latest", "delete", {"owner": "staff"}),
        ("staff", "latest", "delete", {"owner": "someone-else"}),
    ]:
        d = acl.evaluate(*query)
        print(query[:3], d.effect.value, d.rule.as_dict() if d.rule else d.reason)


if __name__ == "__main__":
    main()
