echo("<!DOCTYPE html>\n")
echo(f"<h1>Hello, {escape(name)}!</h1>\n")
for i, item in enumerate(items):
	print(f"<p>{i}: {escape(str(item))}</p>")
# EOF
