from flask import Flask, request, g, jsonify

from finder import ConfigError, FinderEngine, FinderError, QueryConfig, Store
from finder.luogu_parser import convert_luogu_to_config, load_mapping
from finder.settings import load_settings

settings = load_settings()

app = Flask(__name__)
app.json.ensure_ascii = False
app.config.update(
    DATABASE=settings.database,
    MAPPING_FILE=settings.mapping,
    ENUMERATE_THRESHOLD=settings.enumerate_threshold,
)


# --- 数据库连接管理 ---
def get_store():
    store = getattr(g, '_store', None)
    if store is None:
        store = g._store = Store.open(app.config['DATABASE'], readonly=True)
    return store


@app.teardown_appcontext
def close_connection(exception):
    store = getattr(g, '_store', None)
    if store is not None:
        store.close()


# --- 表单数据转换 ---
def to_list_or_none(value):
    if value is None or value == '': return None
    items = [v.strip() for v in value.split(',') if v.strip()]
    return items if items else None


def build_config_from_form(form):
    """把网页表单的字段组装成查询配置，数字格式交给 QueryConfig 校验。"""
    config = {
        'enroll_year_range': [form.get('enroll_min'), form.get('enroll_max')],
        'grade_range': [form.get('grade_min'), form.get('grade_max')],
        'records': [],
    }

    columns = {
        'year_range': ('record_year_min', 'record_year_max'),
        'rank_range': ('record_rank_min', 'record_rank_max'),
        'score_range': ('record_score_min', 'record_score_max'),
    }
    lists = {
        'province': 'record_province',
        'contest_type': 'record_contest_type',
        'level_range': 'record_level_range',
    }
    values = {name: form.getlist(name) for pair in columns.values() for name in pair}
    values.update({name: form.getlist(name) for name in lists.values()})
    count = max((len(v) for v in values.values()), default=0)

    def pick(name, i):
        items = values[name]
        return items[i] if i < len(items) else None

    for i in range(count):
        record_cond = {field: [pick(lo, i), pick(hi, i)] for field, (lo, hi) in columns.items()}
        record_cond.update({field: to_list_or_none(pick(name, i)) for field, name in lists.items()})
        # 表单里完全空白的一行不算条件
        is_valid_condition = any(
            (isinstance(v, list) and any(x not in (None, '') for x in v))
            for v in record_cond.values()
        )
        if is_valid_condition:
            config['records'].append(record_cond)

    return QueryConfig.from_dict(config)


def build_config(form):
    query_type = form.get('query_type', 'ui')
    if query_type == 'yaml':
        return QueryConfig.from_yaml(form.get('yaml_content', ''))
    if query_type == 'luogu':
        luogu_content = form.get('luogu_content', '')
        if not luogu_content:
            return QueryConfig()
        return convert_luogu_to_config(luogu_content, load_mapping(app.config['MAPPING_FILE']))
    if query_type == 'ui':
        return build_config_from_form(form)
    raise ConfigError(f"未知的查询方式: {query_type}")


# --- 路由 ---
@app.route('/search', methods=['POST'])
def search():
    try:
        config = build_config(request.form)
    except ConfigError as e:
        return jsonify(error=f"配置解析失败: {e}"), 400

    try:
        engine = FinderEngine(get_store(), threshold=app.config['ENUMERATE_THRESHOLD'])
        result = engine.find(config)
    except FinderError as e:
        app.logger.error("query failed: %s", e)
        return jsonify(error=f"查询失败: {e}"), 500

    return jsonify(
        count=len(result.oiers),
        config=result.config.to_yaml() or "无有效查询条件",
        oiers=[oier.to_dict() for oier in result.oiers],
    )


if __name__ == '__main__':
    app.run(debug=True)
